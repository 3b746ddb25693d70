"""Meeting aggregate, RSVP/proposal state machine and meeting storage."""

from iepsched.meetings.service import MeetingService
from iepsched.meetings.store import InMemoryMeetingStore, MeetingStore, RedisMeetingStore

__all__ = [
    "InMemoryMeetingStore",
    "MeetingService",
    "MeetingStore",
    "RedisMeetingStore",
]
