"""
Likes and collaboration requests.

Uniqueness of (idea, user) for both tables is enforced by the database; a
request that loses a race on those constraints is resolved here rather
than surfacing as an internal error.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.middleware.role_check import is_admin
from backend.models_db import Collaboration, Like, User
from backend.services.idea_store import get_idea
from ideaengine.errors import DuplicateRequest, Forbidden, NotFound
from ideaengine.social import CollaborationStatus, check_collaboration_request, toggle_like_state, transition

logger = logging.getLogger(__name__)


def is_liked(db: Session, idea_id: str, user_id: str) -> bool:
    return db.query(Like.id).filter(Like.idea_id == idea_id, Like.user_id == user_id).first() is not None


def toggle_like(db: Session, idea_id: str, user: User) -> bool:
    """Flip the like state of ``idea_id`` for ``user`` and return the new state."""
    get_idea(db, idea_id)

    existing = db.query(Like).filter(Like.idea_id == idea_id, Like.user_id == user.id).first()
    liked = toggle_like_state(existing is not None)
    if not liked:
        db.delete(existing)
        db.commit()
        return False

    db.add(Like(idea_id=idea_id, user_id=user.id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent toggle inserted the row first; it is already liked
        db.rollback()
        logger.info("Like on idea %s by user %s already present", idea_id, user.id)
    return True


def get_collaboration(db: Session, idea_id: str, user_id: str) -> Optional[Collaboration]:
    return (
        db.query(Collaboration)
        .filter(Collaboration.idea_id == idea_id, Collaboration.user_id == user_id)
        .first()
    )


def request_collaboration(db: Session, idea_id: str, requester: User, message: Optional[str] = None) -> Collaboration:
    """Create a pending collaboration request from a non-author.

    Raises:
        NotFound: no such idea.
        SelfCollaboration: the requester is the author.
        DuplicateRequest: a request for the pair exists, whatever its status.
    """
    idea = get_idea(db, idea_id)
    existing = get_collaboration(db, idea_id, requester.id)
    status = check_collaboration_request(
        idea.author_id,
        requester.id,
        CollaborationStatus(existing.status) if existing else None,
    )

    collaboration = Collaboration(
        idea_id=idea_id,
        user_id=requester.id,
        message=message,
        status=status.value,
    )
    db.add(collaboration)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateRequest() from None
    db.refresh(collaboration)
    logger.info("Collaboration requested on idea %s by user %s", idea_id, requester.id)
    return collaboration


def decide_collaboration(
    db: Session,
    idea_id: str,
    requester_id: str,
    status: CollaborationStatus,
    actor: User,
) -> Collaboration:
    """Accept or reject a pending request. Only the idea's author or an admin may decide."""
    idea = get_idea(db, idea_id)
    if actor.id != idea.author_id and not is_admin(actor):
        raise Forbidden("Only the idea's author can respond to collaboration requests")

    collaboration = get_collaboration(db, idea_id, requester_id)
    if not collaboration:
        raise NotFound("Collaboration request not found")

    collaboration.status = transition(CollaborationStatus(collaboration.status), status).value
    db.commit()
    db.refresh(collaboration)
    logger.info("Collaboration on idea %s by user %s is now %s", idea_id, requester_id, collaboration.status)
    return collaboration
