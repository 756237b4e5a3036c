"""AI assistant route — questions about an idea in development."""

from fastapi import APIRouter, Depends

from backend.ai.analyst import IdeaAnalyst, get_analyst
from backend.auth import get_current_user
from backend.models import AskRequest, AskResponse
from backend.models_db import User

router = APIRouter()


@router.post("/ai/ask", response_model=AskResponse)
async def ask_assistant(
    body: AskRequest,
    current_user: User = Depends(get_current_user),
    analyst: IdeaAnalyst = Depends(get_analyst),
):
    """Answer a question using the idea's title, description and phase as context."""
    context = body.idea_context
    answer = await analyst.ask(body.question, context.title, context.description, context.phase)
    return AskResponse(response=answer)
