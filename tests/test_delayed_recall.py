"""
Tests for delayed-recall link generation and session validation
"""
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from sqlmodel import Session, select

from offloading.core.clock import as_utc, utcnow
from offloading.models.event import Event
from offloading.models.recall_session import RecallSession


def _generate(client, pid="p1", eid="e1", delay=None):
    body = {"participantId": pid, "experimentId": eid}
    if delay is not None:
        body["delayHours"] = delay
    r = client.post("/v1/delayed-recall/generate-link", json=body)
    assert r.status_code == 200
    return r.json()


def _token(link):
    return parse_qs(urlparse(link["delayed_recall_url"]).query)["token"][0]


def _validate(client, token, pid="p1", eid="e1"):
    return client.post("/v1/delayed-recall/validate-session", json={
        "participantId": pid, "experimentId": eid, "sessionToken": token,
    })


class TestGenerateLink:

    def test_link_shape(self, client):
        link = _generate(client)
        assert link["success"] is True
        assert link["delay_hours"] == 48
        url = urlparse(link["delayed_recall_url"])
        assert url.netloc == "study.test"
        assert url.path == "/delayed-recall"
        q = parse_qs(url.query)
        assert q["participantId"] == ["p1"]
        assert q["experimentId"] == ["e1"]
        # only a prefix of the token is echoed back
        assert link["session_token"].endswith("...")
        assert _token(link).startswith(link["session_token"][:-3])

    def test_scheduled_in_the_future(self, client, engine):
        link = _generate(client, delay=12)
        with Session(engine) as s:
            rs = s.get(RecallSession, link["record_id"])
        assert rs.status == "pending"
        assert as_utc(rs.scheduled_at) - utcnow() > timedelta(hours=11)

    def test_bulk(self, client, engine):
        r = client.post("/v1/delayed-recall/generate-bulk-links", json={
            "participantIds": ["a", "b", " "], "experimentId": "e1", "delayHours": 24,
        })
        body = r.json()
        assert body["total_requested"] == 3
        assert body["total_generated"] == 2
        assert "error" in body["links"][2]
        with Session(engine) as s:
            rows = s.exec(select(RecallSession)).all()
            events = s.exec(select(Event).where(Event.event_type == "delayed_recall_bulk_generated")).all()
        assert all(r.bulk_generated for r in rows)
        assert len(rows) == 2
        assert len(events) == 2

    def test_bulk_needs_ids(self, client):
        r = client.post("/v1/delayed-recall/generate-bulk-links", json={"participantIds": [], "experimentId": "e1"})
        assert r.status_code == 422


class TestValidateSession:

    def test_open_window_starts_session(self, client, engine):
        link = _generate(client, delay=0)
        r = _validate(client, _token(link))
        assert r.status_code == 200
        assert r.json()["valid"] is True
        with Session(engine) as s:
            rs = s.get(RecallSession, link["record_id"])
        assert rs.status == "started"
        assert rs.accessed_at is not None

    def test_second_access_is_rejected(self, client):
        token = _token(_generate(client, delay=0))
        assert _validate(client, token).status_code == 200
        assert _validate(client, token).status_code == 404

    def test_too_early(self, client):
        token = _token(_generate(client, delay=48))
        r = _validate(client, token)
        assert r.status_code == 403
        body = r.json()
        assert body["valid"] is False
        assert body["can_access_at"]
        assert "42 hours" in body["error"]

    def test_expired(self, client, engine):
        link = _generate(client, delay=0)
        with Session(engine) as s:
            rs = s.get(RecallSession, link["record_id"])
            rs.scheduled_at = utcnow() - timedelta(hours=30)
            s.add(rs)
            s.commit()
        r = _validate(client, _token(link))
        assert r.status_code == 410
        assert r.json()["expired"] is True

    def test_wrong_participant(self, client):
        token = _token(_generate(client, delay=0))
        assert _validate(client, token, pid="someone-else").status_code == 404

    def test_forged_token(self, client):
        _generate(client, delay=0)
        assert _validate(client, "AAAA-BBBB-CCCC").status_code == 404


class TestSessions:

    def test_list_and_complete(self, client, engine):
        link = _generate(client, delay=0)
        _generate(client, eid="e2", delay=0)

        listed = client.get("/v1/delayed-recall/sessions/p1").json()
        assert listed["total_sessions"] == 2
        only_e1 = client.get("/v1/delayed-recall/sessions/p1", params={"experimentId": "e1"}).json()
        assert only_e1["total_sessions"] == 1
        assert only_e1["sessions"][0]["session_token"].endswith("...")

        r = client.post("/v1/delayed-recall/complete-session", json={
            "participantId": "p1", "experimentId": "e1",
            "sessionToken": _token(link), "completionData": {"score": 0.8},
        })
        assert r.json()["success"] is True
        with Session(engine) as s:
            rs = s.get(RecallSession, link["record_id"])
        assert rs.status == "completed"
        assert rs.completion_data == {"score": 0.8}

    def test_complete_unknown(self, client):
        r = client.post("/v1/delayed-recall/complete-session", json={
            "participantId": "p1", "experimentId": "e1", "sessionToken": "AAAA",
        })
        assert r.status_code == 404


class TestTimestamps:

    def test_stored_times_are_utc(self, client, engine):
        link = _generate(client, delay=0)
        assert _validate(client, _token(link)).status_code == 200
        with Session(engine) as s:
            rs = s.get(RecallSession, link["record_id"])
        before = utcnow()
        assert as_utc(rs.accessed_at) <= before
        assert before - as_utc(rs.created_at) < timedelta(minutes=5)

    def test_scheduling_note_has_single_offset(self, client):
        note = _generate(client, delay=1)["instructions"]["scheduling_note"]
        assert note.endswith("+00:00)")
