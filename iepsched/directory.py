"""Read-only team directory: members' weekly schedules and blackout dates."""

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from iepsched.errors import NotFoundError
from iepsched.models.team import DistrictBlackout, IndividualBlackout, TeamMember

logger = logging.getLogger(__name__)


class TeamDirectory:
    def __init__(
        self,
        members: Iterable[TeamMember] = (),
        district_blackouts: Iterable[DistrictBlackout] = (),
        individual_blackouts: Iterable[IndividualBlackout] = (),
    ) -> None:
        self._members = {m.id: m for m in members}
        self.district_blackouts = list(district_blackouts)
        self.individual_blackouts = list(individual_blackouts)

    @classmethod
    def from_file(cls, path: str | Path) -> "TeamDirectory":
        """Load a directory from JSON.

        Expected shape::

            {"members": [...], "district_blackouts": [...], "individual_blackouts": [...]}
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        directory = cls(
            members=[TeamMember.model_validate(m) for m in data.get("members", [])],
            district_blackouts=[DistrictBlackout.model_validate(b) for b in data.get("district_blackouts", [])],
            individual_blackouts=[IndividualBlackout.model_validate(b) for b in data.get("individual_blackouts", [])],
        )
        logger.info("Loaded %d team members from %s", len(directory), path)
        return directory

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members

    def members(self) -> list[TeamMember]:
        return list(self._members.values())

    def get(self, member_id: str) -> TeamMember:
        member = self._members.get(member_id)
        if member is None:
            raise NotFoundError(
                detail=f"Team member {member_id} not found",
                error_code="MEMBER_NOT_FOUND",
                member_id=member_id,
            )
        return member

    def resolve(self, member_ids: Sequence[str]) -> list[TeamMember]:
        """Look up every ID, in order; the first unknown ID raises NotFoundError."""
        return [self.get(member_id) for member_id in member_ids]
