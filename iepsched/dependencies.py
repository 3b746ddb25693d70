"""Dependency injection for FastAPI endpoints.

Controllers receive the meeting service and team directory built at startup
through these dependencies instead of reading module globals.

Usage in controllers:
    from iepsched.dependencies import Meetings

    @router.get("/example")
    async def example(service: Meetings):
        return await service.list_meetings()
"""

from typing import Annotated

from fastapi import Depends

from iepsched import state
from iepsched.config import SchedulingSettings, get_settings
from iepsched.directory import TeamDirectory
from iepsched.errors import ServiceUnavailableError
from iepsched.meetings import MeetingService


def get_meeting_service() -> MeetingService:
    """Get the meeting service.

    Raises:
        ServiceUnavailableError: If the service has not been initialized.
    """
    if state.meeting_service is None:
        raise ServiceUnavailableError(detail="Meeting service not initialized")
    return state.meeting_service


def get_team_directory() -> TeamDirectory:
    """Get the team directory.

    Raises:
        ServiceUnavailableError: If the directory has not been loaded.
    """
    if state.team_directory is None:
        raise ServiceUnavailableError(detail="Team directory not loaded")
    return state.team_directory


def get_scheduling_settings() -> SchedulingSettings:
    return get_settings().scheduling


Meetings = Annotated[MeetingService, Depends(get_meeting_service)]
Directory = Annotated[TeamDirectory, Depends(get_team_directory)]
Scheduling = Annotated[SchedulingSettings, Depends(get_scheduling_settings)]
