"""Inbox projection: actionable items for one user, derived from meeting state.

Nothing here is stored; the inbox is recomputed from the meeting collection on
every call.
"""

from collections import Counter
from collections.abc import Iterable, Mapping

from iepsched.models.meetings import Meeting
from iepsched.models.notifications import NotificationItem, NotificationSummary


def _when(meeting: Meeting) -> str:
    if meeting.date is None or meeting.time is None:
        return "TBD"
    return f"{meeting.date.isoformat()} at {meeting.time}"


def _meeting_notifications(
    meeting: Meeting, user_id: str, names: Mapping[str, str]
) -> list[NotificationItem]:
    items: list[NotificationItem] = []
    is_organizer = meeting.created_by_user_id == user_id
    user_rsvp = meeting.rsvp_of(user_id)

    if user_rsvp is not None and user_rsvp.status == "Pending" and not is_organizer:
        items.append(
            NotificationItem(
                id=f"invitation-{meeting.id}",
                type="new_invitation",
                priority="high",
                meeting_id=meeting.id,
                timestamp=meeting.updated_at,
                title="New Meeting Invitation",
                description=f"{meeting.display_type} for {meeting.student_name} on {_when(meeting)}",
                action_text="View & RSVP",
            )
        )
        # another member already answered, so this Pending came from an edit reset
        if any(p.team_member_id != user_id and p.status != "Pending" for p in meeting.participants):
            items.append(
                NotificationItem(
                    id=f"updated-{meeting.id}",
                    type="meeting_updated",
                    priority="high",
                    meeting_id=meeting.id,
                    timestamp=meeting.updated_at,
                    title="Meeting Updated",
                    description=(
                        f"{meeting.display_type} for {meeting.student_name} has been updated. "
                        f"New details: {_when(meeting)}. Please re-confirm your attendance."
                    ),
                    action_text="Review Changes",
                )
            )

    for proposal in meeting.alternative_proposals:
        ballot = proposal.vote_of(user_id)
        if ballot is None or ballot.vote != "Pending":
            continue
        proposer = names.get(proposal.proposed_by_member_id, proposal.proposed_by_member_id)
        items.append(
            NotificationItem(
                id=f"alternative-{meeting.id}-{proposal.proposal_id}",
                type="alternative_proposed",
                priority="medium",
                meeting_id=meeting.id,
                proposal_id=proposal.proposal_id,
                timestamp=proposal.proposed_at,
                title="Alternative Time Proposed",
                description=(
                    f"{proposer} proposed a new time for {meeting.display_type} - {meeting.student_name}. "
                    f"Proposed: {proposal.proposed_date.isoformat()} at {proposal.proposed_time}"
                ),
                action_text="Vote on Proposal",
            )
        )

    if is_organizer:
        for participant in meeting.participants:
            if (
                participant.team_member_id == user_id
                or participant.status == "Pending"
                or participant.responded_at is None
            ):
                continue
            verb = {"Accepted": "accepted", "Declined": "declined"}.get(participant.status, "responded to")
            responder = names.get(participant.team_member_id, participant.team_member_id)
            items.append(
                NotificationItem(
                    id=f"rsvp-{meeting.id}-{participant.team_member_id}",
                    type="rsvp_response",
                    priority="low",
                    meeting_id=meeting.id,
                    responder_id=participant.team_member_id,
                    timestamp=participant.responded_at,
                    title="RSVP Response Received",
                    description=f"{responder} has {verb} the meeting for {meeting.student_name}",
                    action_text="View Details",
                )
            )
    return items


def derive_notifications(
    meetings: Iterable[Meeting],
    user_id: str,
    names: Mapping[str, str] | None = None,
) -> list[NotificationItem]:
    """Build the user's inbox from scheduled meetings they attend or organize.

    Items are ordered newest first; equal timestamps keep derivation order.
    ``names`` maps member IDs to display names for the descriptions.
    """
    names = names or {}
    items: list[NotificationItem] = []
    for meeting in meetings:
        if meeting.status != "scheduled":
            continue
        if user_id not in meeting.team_member_ids and meeting.created_by_user_id != user_id:
            continue
        items.extend(_meeting_notifications(meeting, user_id, names))
    return sorted(items, key=lambda n: n.timestamp, reverse=True)


def summarize_notifications(items: Iterable[NotificationItem]) -> NotificationSummary:
    items = list(items)
    priorities = Counter(n.priority for n in items)
    types = Counter(n.type for n in items)
    return NotificationSummary(
        total=len(items),
        high=priorities["high"],
        medium=priorities["medium"],
        low=priorities["low"],
        invitations=types["new_invitation"],
        updates=types["meeting_updated"],
        proposals=types["alternative_proposed"],
        responses=types["rsvp_response"],
    )
