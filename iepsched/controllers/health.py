from fastapi import APIRouter
from typing import Dict

from iepsched import state

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, str]:
    store_status = "disconnected"
    if state.meeting_service:
        store_status = "healthy" if await state.meeting_service.store.ping() else "unhealthy"

    return {"status": "ok", "store": store_status}
