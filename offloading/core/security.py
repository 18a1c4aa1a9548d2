import hmac

from fastapi import Request, HTTPException
from offloading.core.settings import settings

async def verify_api_key(request: Request):
    """
    Researcher endpoints require the x-api-key header to match API_KEY.
    """
    api_key = request.headers.get("x-api-key") or ""
    expected = getattr(settings, "API_KEY", "") or ""
    if not api_key or not hmac.compare_digest(api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
