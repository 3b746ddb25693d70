from fastapi import APIRouter

from iepsched.dependencies import Directory, Meetings
from iepsched.models.notifications import InboxResponse
from iepsched.notifications import derive_notifications, summarize_notifications

router = APIRouter(tags=["inbox"])


@router.get("/inbox/{user_id}", response_model=InboxResponse)
async def get_inbox(user_id: str, service: Meetings, directory: Directory) -> InboxResponse:
    meetings = await service.list_meetings(member_id=user_id)
    names = {m.id: m.name for m in directory.members()}
    items = derive_notifications(meetings, user_id, names)
    return InboxResponse(user_id=user_id, notifications=items, summary=summarize_notifications(items))
