"""
Feed read model.

The feed view combines four independent tables (ideas, likes, comments,
accepted collaborations) into one denormalized record per idea. It is a
pure projection over rows loaded by the store, recomputed on every read,
so the counts it reports are always the true aggregates.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Set


@dataclass
class IdeaRecord:
    """Base idea fields joined with the author's display name."""
    id: str
    title: str
    description: str
    author_id: str
    author_name: str
    phase: str
    phase_index: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    ai_analysis: Optional[dict] = None
    is_public: bool = True


def project_idea(
    record: IdeaRecord,
    likes: int = 0,
    comments: int = 0,
    collaborators: Optional[List[str]] = None,
    is_liked: bool = False,
) -> Dict:
    """Build a single feed entry."""
    return {
        'id': record.id,
        'title': record.title,
        'description': record.description,
        'author': record.author_name,
        'authorId': record.author_id,
        'phase': record.phase,
        'phaseIndex': record.phase_index,
        'tags': list(record.tags or []),
        'aiAnalysis': record.ai_analysis,
        'likes': int(likes),
        'comments': int(comments),
        'collaborators': list(collaborators or []),
        'isLiked': bool(is_liked),
        'createdAt': record.created_at,
        'updatedAt': record.updated_at,
    }


def project_feed(
    records: Sequence[IdeaRecord],
    like_counts: Mapping[str, int],
    comment_counts: Mapping[str, int],
    collaborators: Mapping[str, List[str]],
    liked_ids: Optional[Set[str]] = None,
) -> List[Dict]:
    """
    Project idea rows and their aggregates into feed entries, newest first.

    Args:
        records: ideas to include
        like_counts: idea id -> number of Like rows
        comment_counts: idea id -> number of Comment rows
        collaborators: idea id -> names of accepted collaborators
        liked_ids: ids of ideas the viewer has liked; None when there is no
            viewer, in which case every entry reports isLiked = False

    Returns:
        List of feed entry dicts ordered by creation time, descending.
    """
    liked_ids = liked_ids or set()
    ordered = sorted(records, key=lambda r: r.created_at, reverse=True)
    return [
        project_idea(
            r,
            likes=like_counts.get(r.id, 0),
            comments=comment_counts.get(r.id, 0),
            collaborators=collaborators.get(r.id, []),
            is_liked=r.id in liked_ids,
        )
        for r in ordered
    ]
