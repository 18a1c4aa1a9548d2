# offloading/core/recall_token.py
from __future__ import annotations
import hmac, hashlib, base64, uuid
from typing import Optional
from offloading.core.settings import settings


def _secret() -> bytes:
    secret = (getattr(settings, "STUDY_SECRET", "") or "").encode()
    if not secret:
        raise RuntimeError("STUDY_SECRET not configured")
    return secret


def make_token(session_id: uuid.UUID) -> str:
    """Signed, link-friendly token for a delayed-recall session (XXXX-XXXX-...)."""
    sid = session_id.bytes  # 16 bytes
    sig = hmac.new(_secret(), sid, hashlib.sha256).digest()[:6]  # 6 bytes
    raw = sid + sig  # 22 bytes
    b32 = base64.b32encode(raw).decode().rstrip("=")  # A-Z2-7

    return "-".join(b32[i:i+4] for i in range(0, len(b32), 4))


def parse_token(token: str) -> Optional[uuid.UUID]:
    """Session id for a well-formed token with a valid signature, else None."""
    if not token:
        return None
    secret = _secret()
    try:
        b32 = token.replace("-", "").strip().upper()
        pad = "=" * ((8 - (len(b32) % 8)) % 8)
        raw = base64.b32decode(b32 + pad)
    except (ValueError, TypeError):
        return None
    sid, sig = raw[:16], raw[16:]
    if len(sid) != 16 or len(sig) != 6:
        return None
    check = hmac.new(secret, sid, hashlib.sha256).digest()[:6]
    if hmac.compare_digest(sig, check):
        return uuid.UUID(bytes=sid)
    return None


def mask_token(token: str) -> str:
    # only a prefix ever leaves the service in logs and listings
    return (token or "")[:8] + "..."
