"""
Idea store: idea records and the feed view built from them.

Counts and collaborator lists are aggregated from their own tables on every
read; the projection into feed entries lives in ``ideaengine.feed``.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.models_db import Collaboration, Comment, Idea, Like, User
from ideaengine.errors import Forbidden, NotFound, ValidationError
from ideaengine.feed import IdeaRecord, project_feed, project_idea
from ideaengine.phases import DEFAULT_PHASE, resolve_phase
from ideaengine.social import CollaborationStatus

logger = logging.getLogger(__name__)

PUBLIC_FEED_LIMIT = 20


def _clean_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


def _clean_tags(tags: Optional[Sequence[str]]) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("Tags must be a list of strings")
    return [t.strip() for t in tags if t.strip()]


def get_idea(db: Session, idea_id: str) -> Idea:
    idea = db.query(Idea).filter(Idea.id == idea_id).first()
    if not idea:
        raise NotFound("Idea not found")
    return idea


def create_idea(
    db: Session,
    author: User,
    title: str,
    description: str,
    tags: Optional[Sequence[str]] = None,
    phase: Optional[str] = None,
    phase_index: Optional[int] = None,
) -> Idea:
    """Persist a new public idea owned by ``author``. Phase defaults to the first stage."""
    if not (title or "").strip() or not (description or "").strip():
        raise ValidationError("Title and description are required")
    phase, phase_index = resolve_phase(phase, phase_index)
    if phase is None:
        phase, phase_index = resolve_phase(DEFAULT_PHASE)

    idea = Idea(
        title=title.strip(),
        description=description.strip(),
        author_id=author.id,
        phase=phase,
        phase_index=phase_index,
        tags=_clean_tags(tags),
        is_public=True,
    )
    db.add(idea)
    db.commit()
    db.refresh(idea)
    logger.info("Idea %s created by user %s", idea.id, author.id)
    return idea


def update_idea(db: Session, idea_id: str, user: User, patch: dict) -> Idea:
    """Apply a partial update from the idea's author.

    Keys that are absent or None leave the stored value untouched.

    Raises:
        NotFound: no such idea.
        Forbidden: ``user`` is not the author.
        ValidationError: a provided field is blank or the phase pair is inconsistent.
    """
    idea = get_idea(db, idea_id)
    if idea.author_id != user.id:
        raise Forbidden("You can only update your own ideas")

    patch = {k: v for k, v in patch.items() if v is not None}
    if "title" in patch:
        idea.title = _clean_text(patch["title"], "Title")
    if "description" in patch:
        idea.description = _clean_text(patch["description"], "Description")
    if "tags" in patch:
        idea.tags = _clean_tags(patch["tags"])
    phase, phase_index = resolve_phase(patch.get("phase"), patch.get("phase_index"))
    if phase is not None:
        idea.phase = phase
        idea.phase_index = phase_index

    db.commit()
    db.refresh(idea)
    return idea


def _to_record(idea: Idea, author_name: str) -> IdeaRecord:
    return IdeaRecord(
        id=idea.id,
        title=idea.title,
        description=idea.description,
        author_id=idea.author_id,
        author_name=author_name,
        phase=idea.phase,
        phase_index=idea.phase_index,
        created_at=idea.created_at,
        updated_at=idea.updated_at,
        tags=list(idea.tags or []),
        ai_analysis=idea.ai_analysis,
        is_public=idea.is_public,
    )


def _aggregates(
    db: Session,
    idea_ids: List[str],
    viewer_id: Optional[str] = None,
) -> Tuple[Dict[str, int], Dict[str, int], Dict[str, List[str]], Optional[Set[str]]]:
    """Like counts, comment counts, accepted collaborator names and the viewer's likes."""
    if not idea_ids:
        return {}, {}, {}, set() if viewer_id else None

    like_counts = dict(
        db.query(Like.idea_id, func.count(Like.id))
        .filter(Like.idea_id.in_(idea_ids))
        .group_by(Like.idea_id)
        .all()
    )
    comment_counts = dict(
        db.query(Comment.idea_id, func.count(Comment.id))
        .filter(Comment.idea_id.in_(idea_ids))
        .group_by(Comment.idea_id)
        .all()
    )
    collaborators: Dict[str, List[str]] = defaultdict(list)
    rows = (
        db.query(Collaboration.idea_id, User.name)
        .join(User, User.id == Collaboration.user_id)
        .filter(Collaboration.idea_id.in_(idea_ids))
        .filter(Collaboration.status == CollaborationStatus.ACCEPTED.value)
        .order_by(Collaboration.updated_at, Collaboration.id)
        .all()
    )
    for idea_id, name in rows:
        collaborators[idea_id].append(name)

    liked_ids = None
    if viewer_id:
        liked_ids = {
            idea_id for (idea_id,) in
            db.query(Like.idea_id)
            .filter(Like.user_id == viewer_id, Like.idea_id.in_(idea_ids))
            .all()
        }
    return like_counts, comment_counts, dict(collaborators), liked_ids


def _feed(db: Session, query, viewer_id: Optional[str]) -> List[dict]:
    records = [_to_record(idea, name) for idea, name in query.all()]
    like_counts, comment_counts, collaborators, liked_ids = _aggregates(
        db, [r.id for r in records], viewer_id
    )
    return project_feed(records, like_counts, comment_counts, collaborators, liked_ids)


def _base_query(db: Session):
    return (
        db.query(Idea, User.name)
        .join(User, User.id == Idea.author_id)
        .order_by(Idea.created_at.desc(), Idea.id.desc())
    )


def list_feed(db: Session, viewer_id: Optional[str] = None) -> List[dict]:
    """Every idea, newest first. ``isLiked`` reflects ``viewer_id`` when given."""
    return _feed(db, _base_query(db), viewer_id)


def list_public_feed(db: Session, limit: int = PUBLIC_FEED_LIMIT) -> List[dict]:
    """Newest public ideas for anonymous visitors; ``isLiked`` is always False."""
    query = _base_query(db).filter(Idea.is_public.is_(True)).limit(limit)
    return _feed(db, query, None)


def idea_view(db: Session, idea: Idea, viewer_id: Optional[str] = None) -> dict:
    """Feed entry for a single idea."""
    author_name = db.query(User.name).filter(User.id == idea.author_id).scalar() or ""
    like_counts, comment_counts, collaborators, liked_ids = _aggregates(db, [idea.id], viewer_id)
    return project_idea(
        _to_record(idea, author_name),
        likes=like_counts.get(idea.id, 0),
        comments=comment_counts.get(idea.id, 0),
        collaborators=collaborators.get(idea.id, []),
        is_liked=bool(liked_ids and idea.id in liked_ids),
    )
