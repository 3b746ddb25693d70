from typing import Optional
from iepsched.directory import TeamDirectory
from iepsched.meetings import MeetingService

# Global runtime state initialized in lifespan.setup_resources
team_directory: Optional[TeamDirectory] = None
meeting_service: Optional[MeetingService] = None
