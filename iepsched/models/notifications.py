import datetime as dt
from typing import Literal

from pydantic import BaseModel

NotificationType = Literal["new_invitation", "meeting_updated", "alternative_proposed", "rsvp_response"]
Priority = Literal["high", "medium", "low"]


class NotificationItem(BaseModel):
    id: str
    type: NotificationType
    priority: Priority
    meeting_id: str
    timestamp: dt.datetime
    title: str
    description: str
    action_text: str
    proposal_id: str | None = None
    responder_id: str | None = None


class NotificationSummary(BaseModel):
    total: int
    high: int
    medium: int
    low: int
    invitations: int
    updates: int
    proposals: int
    responses: int


class InboxResponse(BaseModel):
    user_id: str
    notifications: list[NotificationItem]
    summary: NotificationSummary
