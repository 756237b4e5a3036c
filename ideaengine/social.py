"""
Social state machines: like toggle and collaboration requests.

Likes are a two-state flip per (idea, user). Collaboration requests start
pending and may be decided once, by the idea's author or an administrator.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from ideaengine.errors import DuplicateRequest, InvalidTransition, SelfCollaboration


class CollaborationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS: Dict[CollaborationStatus, FrozenSet[CollaborationStatus]] = {
    CollaborationStatus.PENDING: frozenset({CollaborationStatus.ACCEPTED, CollaborationStatus.REJECTED}),
    CollaborationStatus.ACCEPTED: frozenset(),
    CollaborationStatus.REJECTED: frozenset(),
}


def toggle_like_state(liked: bool) -> bool:
    """Return the like state after a toggle."""
    return not liked


def check_collaboration_request(
    author_id: str,
    requester_id: str,
    existing_status: Optional[CollaborationStatus],
) -> CollaborationStatus:
    """
    Decide whether a collaboration request may be created.

    Any existing request blocks a new one, including a rejected one.

    Returns:
        The status the new request starts in.

    Raises:
        SelfCollaboration: the requester authored the idea.
        DuplicateRequest: a request already exists for the pair.
    """
    if author_id == requester_id:
        raise SelfCollaboration()
    if existing_status is not None:
        raise DuplicateRequest()
    return CollaborationStatus.PENDING


def transition(current: CollaborationStatus, target: CollaborationStatus) -> CollaborationStatus:
    """Move a collaboration request to ``target`` if the state machine allows it."""
    current = CollaborationStatus(current)
    target = CollaborationStatus(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move a collaboration request from '{current.value}' to '{target.value}'"
        )
    return target
