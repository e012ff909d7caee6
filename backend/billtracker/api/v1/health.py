# billtracker/api/v1/health.py
from fastapi import APIRouter

from billtracker.schemas.simple import Health

router = APIRouter(tags=["health"])


@router.get("/health", response_model=Health)
def health():
    return {"status": "ok"}
