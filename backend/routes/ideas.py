"""Idea routes — feed, creation, updates, likes and collaboration requests."""

import logging
import os
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from backend.ai.analyst import IdeaAnalyst, get_analyst
from backend.auth import get_current_user, optional_user
from backend.database import get_db
from backend.models import (
    CollaborationDecisionRequest,
    CollaborationRequestBody,
    CollaborationResponse,
    CollaborationView,
    IdeaCreateRequest,
    IdeaListResponse,
    IdeaResponse,
    IdeaUpdateRequest,
    IdeaView,
    LikeResponse,
)
from backend.models_db import Collaboration, User
from backend.services import idea_store, social
from backend.services.enrichment import enrich_idea, enrich_idea_in_background

logger = logging.getLogger(__name__)

router = APIRouter()


def enrich_in_background() -> bool:
    return os.getenv("AI_ENRICH_IN_BACKGROUND", "false").lower() in ("1", "true", "yes")


def _collaboration_view(collaboration: Collaboration) -> CollaborationView:
    return CollaborationView(
        idea_id=collaboration.idea_id,
        user_id=collaboration.user_id,
        message=collaboration.message,
        status=collaboration.status,
    )


@router.get("/ideas", response_model=IdeaListResponse)
async def list_ideas(
    current_user: Optional[User] = Depends(optional_user),
    db: Session = Depends(get_db),
):
    """All ideas, newest first, with the caller's like state when authenticated."""
    viewer_id = current_user.id if current_user else None
    return IdeaListResponse(ideas=idea_store.list_feed(db, viewer_id))


@router.get("/ideas/public", response_model=IdeaListResponse)
async def list_public_ideas(db: Session = Depends(get_db)):
    """Newest public ideas for visitors who are not signed in."""
    return IdeaListResponse(ideas=idea_store.list_public_feed(db))


@router.post("/ideas", response_model=IdeaResponse, status_code=201)
async def create_idea(
    body: IdeaCreateRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    analyst: IdeaAnalyst = Depends(get_analyst),
):
    """Create an idea, then attach an AI analysis to it."""
    idea = idea_store.create_idea(
        db,
        current_user,
        body.title,
        body.description,
        tags=body.tags,
        phase=body.phase,
        phase_index=body.phase_index,
    )

    if enrich_in_background():
        background_tasks.add_task(
            enrich_idea_in_background, idea.id, analyst, request.app.state.session_factory
        )
    else:
        await enrich_idea(db, idea, analyst)

    return IdeaResponse(
        message="Idea created successfully",
        idea=IdeaView.model_validate(idea_store.idea_view(db, idea, current_user.id)),
    )


@router.put("/ideas/{idea_id}", response_model=IdeaResponse)
async def update_idea(
    idea_id: str,
    body: IdeaUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update an idea owned by the caller. Omitted fields are left unchanged."""
    idea = idea_store.update_idea(db, idea_id, current_user, body.model_dump(exclude_unset=True))
    return IdeaResponse(
        message="Idea updated successfully",
        idea=IdeaView.model_validate(idea_store.idea_view(db, idea, current_user.id)),
    )


@router.post("/ideas/{idea_id}/like", response_model=LikeResponse)
async def toggle_like(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Like the idea, or remove the caller's like if already present."""
    liked = social.toggle_like(db, idea_id, current_user)
    return LikeResponse(message="Idea liked" if liked else "Idea unliked", liked=liked)


@router.post("/ideas/{idea_id}/collaborate", response_model=CollaborationResponse, status_code=201)
async def request_collaboration(
    idea_id: str,
    body: Optional[CollaborationRequestBody] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Ask to collaborate on someone else's idea."""
    message = body.message if body else None
    collaboration = social.request_collaboration(db, idea_id, current_user, message)
    return CollaborationResponse(
        message="Collaboration request sent successfully",
        collaboration=_collaboration_view(collaboration),
    )


@router.put("/ideas/{idea_id}/collaborations/{user_id}", response_model=CollaborationResponse)
async def decide_collaboration(
    idea_id: str,
    user_id: str,
    body: CollaborationDecisionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Accept or reject a pending collaboration request (author or admin)."""
    collaboration = social.decide_collaboration(db, idea_id, user_id, body.status, current_user)
    return CollaborationResponse(
        message=f"Collaboration request {collaboration.status}",
        collaboration=_collaboration_view(collaboration),
    )
