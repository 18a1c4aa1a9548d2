# offloading/routers/health.py
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlmodel import Session

from offloading.core.db import get_session
from offloading.core.settings import settings

router = APIRouter(prefix="", tags=["health"])

@router.get("/health")
def health(session: Session = Depends(get_session)):
    session.execute(text("SELECT 1"))
    return {"ok": True, "version": settings.VERSION}
