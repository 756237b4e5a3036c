"""
AI enrichment of newly created ideas.

The idea is already committed when enrichment starts. Whatever happens
here, the record stays; at worst it keeps an empty analysis.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.ai.analyst import IdeaAnalyst
from backend.database import SessionLocal
from backend.models_db import Idea

logger = logging.getLogger(__name__)


def store_analysis(db: Session, idea_id: str, analysis: dict) -> bool:
    """Attach ``analysis`` to an idea that has none yet. Returns whether it was written."""
    try:
        updated = (
            db.query(Idea)
            .filter(Idea.id == idea_id, Idea.ai_analysis.is_(None))
            .update({Idea.ai_analysis: analysis}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store AI analysis for idea %s", idea_id)
        return False
    return updated == 1


async def enrich_idea(db: Session, idea: Idea, analyst: IdeaAnalyst) -> Optional[dict]:
    """Analyse ``idea`` and write the result onto it. Returns the stored analysis, if any."""
    analysis = await analyst.analyze_idea(idea.title, idea.description, list(idea.tags or []))
    if not store_analysis(db, idea.id, analysis):
        logger.info("AI analysis for idea %s not stored", idea.id)
    db.refresh(idea)
    return idea.ai_analysis


async def enrich_idea_in_background(
    idea_id: str,
    analyst: IdeaAnalyst,
    session_factory: Callable[[], Session] = SessionLocal,
) -> None:
    """Background-task variant: runs after the response with its own session."""
    db = session_factory()
    try:
        idea = db.query(Idea).filter(Idea.id == idea_id).first()
        if not idea:
            logger.warning("Idea %s vanished before enrichment", idea_id)
            return
        await enrich_idea(db, idea, analyst)
    finally:
        db.close()
