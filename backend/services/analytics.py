"""Read-only platform counts for the admin dashboard. Always computed fresh."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.models_db import Collaboration, Idea, Like, User
from ideaengine.social import CollaborationStatus


def platform_analytics(db: Session) -> dict:
    users = (
        db.query(User.role, func.count(User.id))
        .group_by(User.role)
        .order_by(User.role)
        .all()
    )
    ideas = (
        db.query(Idea.phase, func.count(Idea.id))
        .group_by(Idea.phase, Idea.phase_index)
        .order_by(Idea.phase_index)
        .all()
    )
    collaborations = (
        db.query(func.count(Collaboration.id))
        .filter(Collaboration.status == CollaborationStatus.ACCEPTED.value)
        .scalar()
    )
    total_likes = db.query(func.count(Like.id)).scalar()

    return {
        "users": [{"role": role, "count": count} for role, count in users],
        "ideas": [{"phase": phase, "count": count} for phase, count in ideas],
        "collaborations": collaborations or 0,
        "total_likes": total_likes or 0,
    }
