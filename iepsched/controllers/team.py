from fastapi import APIRouter

from iepsched.dependencies import Directory
from iepsched.models.team import TeamMember, TeamMembersResponse

router = APIRouter(prefix="/team", tags=["team"])


@router.get("", response_model=TeamMembersResponse)
async def list_team(directory: Directory) -> TeamMembersResponse:
    return TeamMembersResponse(members=directory.members())


@router.get("/{member_id}", response_model=TeamMember)
async def get_team_member(member_id: str, directory: Directory) -> TeamMember:
    return directory.get(member_id)
