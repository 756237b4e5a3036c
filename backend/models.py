"""Pydantic models for IdeaForge API requests and responses."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ideaengine.social import CollaborationStatus


class ApiModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Enums ---

class Role(str, Enum):
    EMPLOYEE = "employee"
    MENTOR = "mentor"
    ADMIN = "admin"


# --- Auth ---

class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.EMPLOYEE


class LoginRequest(ApiModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(ApiModel):
    id: str
    name: str
    email: str
    role: Role


class AuthResponse(ApiModel):
    message: str
    token: str
    user: UserResponse


class VerifyResponse(ApiModel):
    user: UserResponse


class RoleUpdateRequest(ApiModel):
    role: Role


# --- Ideas ---

class MarketOpportunity(ApiModel):
    score: int = Field(..., ge=1, le=10)
    explanation: str


class AIAnalysis(ApiModel):
    """Structured assessment attached to an idea by the enrichment pipeline."""
    similar_solutions: list[str] = Field(default_factory=list, max_length=5)
    market_opportunity: MarketOpportunity
    recommendations: list[str] = Field(default_factory=list, max_length=3)
    risks: list[str] = Field(default_factory=list, max_length=3)


class IdeaCreateRequest(ApiModel):
    title: str = Field(..., max_length=255)
    description: str
    tags: list[str] = Field(default_factory=list)
    phase: Optional[str] = None
    phase_index: Optional[int] = None


class IdeaUpdateRequest(ApiModel):
    """Partial update: omitted or null fields keep their stored values."""
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    phase: Optional[str] = None
    phase_index: Optional[int] = None


class IdeaView(ApiModel):
    """Denormalized feed entry."""
    id: str
    title: str
    description: str
    author: str
    author_id: str
    phase: str
    phase_index: int
    tags: list[str] = Field(default_factory=list)
    ai_analysis: Optional[AIAnalysis] = None
    likes: int = 0
    comments: int = 0
    collaborators: list[str] = Field(default_factory=list)
    is_liked: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


class IdeaListResponse(ApiModel):
    ideas: list[IdeaView]


class IdeaResponse(ApiModel):
    message: str
    idea: IdeaView


# --- Social ---

class LikeResponse(ApiModel):
    message: str
    liked: bool


class CollaborationRequestBody(ApiModel):
    message: Optional[str] = Field(None, max_length=5000)


class CollaborationDecisionRequest(ApiModel):
    status: CollaborationStatus


class CollaborationView(ApiModel):
    idea_id: str
    user_id: str
    message: Optional[str] = None
    status: CollaborationStatus


class CollaborationResponse(ApiModel):
    message: str
    collaboration: CollaborationView


# --- AI assistant ---

class IdeaContext(ApiModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    phase: str = Field(..., min_length=1)


class AskRequest(ApiModel):
    question: str = Field(..., min_length=1, max_length=5000)
    idea_context: IdeaContext


class AskResponse(ApiModel):
    response: str


# --- Admin ---

class RoleCount(ApiModel):
    role: str
    count: int


class PhaseCount(ApiModel):
    phase: str
    count: int


class AnalyticsResponse(ApiModel):
    users: list[RoleCount]
    ideas: list[PhaseCount]
    collaborations: int
    total_likes: int


class ErrorResponse(ApiModel):
    error: str
    message: str
