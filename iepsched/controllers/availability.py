import logging

from fastapi import APIRouter

from iepsched.dependencies import Directory, Scheduling
from iepsched.models.availability import AvailabilityRequest, AvailabilityResult
from iepsched.scheduling import calculate_availability

logger = logging.getLogger("iepsched.availability")
router = APIRouter(tags=["availability"])


@router.post("/availability", response_model=AvailabilityResult)
async def find_availability(
    req: AvailabilityRequest, directory: Directory, scheduling: Scheduling
) -> AvailabilityResult:
    logger.info(
        "POST /availability participants=%d range=%s..%s duration=%d",
        len(req.participant_ids),
        req.start_date,
        req.end_date,
        req.duration_minutes,
    )
    return calculate_availability(
        directory,
        req.participant_ids,
        req.start_date,
        req.end_date,
        req.duration_minutes,
        max_lookahead_days=scheduling.max_lookahead_days,
    )
