"""
Tests for participant registration
"""
import re


def test_register_returns_code(client):
    r = client.post("/v1/participants/register", json={
        "locale": "el", "timezone": "Europe/Athens", "consent": {"given": True},
    })
    assert r.status_code == 201
    body = r.json()
    assert re.fullmatch(r"P-[0-9a-f]{8}", body["participant_code"])

    got = client.get(f"/v1/participants/{body['participant_id']}").json()
    assert got["locale"] == "el"
    assert got["timezone"] == "Europe/Athens"


def test_codes_are_unique(client):
    codes = {client.post("/v1/participants/register", json={}).json()["participant_code"] for _ in range(5)}
    assert len(codes) == 5


def test_unknown_participant(client):
    assert client.get("/v1/participants/nope").status_code == 404
