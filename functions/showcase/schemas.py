"""
Pydantic schemas for the showcase API.

JSON keys are camelCase on the wire; snake_case names are accepted on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
CommentText = Annotated[str, StringConstraints(min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileUpdatePayload(CamelModel):
    name: str = ""
    bio: str = ""


class ProfileResponse(CamelModel):
    subject_id: str
    email: Optional[str] = None
    name: str
    bio: str
    is_complete: bool
    created_at: datetime
    updated_at: datetime


class ProjectPayload(CamelModel):
    """Body for creating or replacing a project's editable fields."""

    title: Title
    description: TrimmedStr = ""
    tags: list[str] = Field(default_factory=list)
    github_link: TrimmedStr = ""
    live_demo: TrimmedStr = ""

    @field_validator("description", "github_link", "live_demo", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_as_no_tags(cls, value):
        return [] if value is None else value


class CommentPayload(CamelModel):
    # Stored exactly as sent; only an empty string is rejected.
    text: CommentText


class RatePayload(CamelModel):
    value: int


class CommentResponse(CamelModel):
    comment_id: str
    author_id: str
    author_email: Optional[str] = None
    text: str
    created_at: datetime


class RatingResponse(CamelModel):
    rater_id: str
    value: int


class ProjectView(CamelModel):
    """A stored project plus the fields derived for the current requester."""

    id: str
    title: str
    description: str
    tags: list[str]
    github_link: str
    live_demo: str
    owner_id: str
    author_name: str
    author_bio: str
    liked_by: list[str]
    favorited_by: list[str]
    comments: list[CommentResponse]
    ratings: list[RatingResponse]
    created_at: datetime
    updated_at: datetime

    likes: int
    comment_count: int
    average_rating: float
    user_rating: int
    liked_by_current_user: bool
    favorited_by_current_user: bool


class ProjectPageResponse(CamelModel):
    projects: list[ProjectView]
    current_page: int
    total_pages: int
    total_projects: int


class ProjectUpdateResponse(CamelModel):
    message: str
    project: ProjectView


class LikeResponse(CamelModel):
    likes: int
    liked: bool


class FavoriteResponse(CamelModel):
    favorited: bool
    project_id: str


class RateResponse(CamelModel):
    average_rating: float
    user_rating: int


class MessageResponse(CamelModel):
    message: str


class UserOverviewResponse(CamelModel):
    profile: ProfileResponse
    total_projects: int
    total_likes: int
    total_comments: int
    projects: list[ProjectView]


class StatusResponse(CamelModel):
    message: str
    store: Literal["memory", "sql"]
