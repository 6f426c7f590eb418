"""
HTTP routes for the showcase API.
"""

from __future__ import annotations

import logging
import math
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query

from showcase.config import Settings
from showcase.db import DbClient
from showcase.dependencies import (
    get_db_client,
    get_optional_identity,
    get_settings_dep,
    require_identity,
)
from showcase.errors import Forbidden, InvalidInput, NotFound
from showcase.guards import can_create_project, can_edit_project
from showcase.mutations import (
    append_comment,
    apply_rating,
    average_rating,
    newest_first,
    remove_comment,
    toggle_membership,
    validate_rating,
)
from showcase.schemas import (
    CommentPayload,
    CommentResponse,
    FavoriteResponse,
    LikeResponse,
    MessageResponse,
    ProfileResponse,
    ProfileUpdatePayload,
    ProjectPageResponse,
    ProjectPayload,
    ProjectUpdateResponse,
    ProjectView,
    RatePayload,
    RateResponse,
    UserOverviewResponse,
)
from showcase.views import materialize, materialize_comment, materialize_profile
from shared.types import Identity, Profile, Project

logger = logging.getLogger(__name__)

projects_router = APIRouter(prefix="/projects", tags=["projects"])
users_router = APIRouter(prefix="/users", tags=["users"])


def _requester_id(identity: Optional[Identity]) -> Optional[str]:
    return identity.subject_id if identity else None


def _load_project(db: DbClient, project_id: str) -> Project:
    project = db.get_project(project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


# Literal sub-paths are registered ahead of "/{project_id}".


@projects_router.get("/my", response_model=list[ProjectView])
def list_my_projects(
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    projects = db.find_projects_by_owner(identity.subject_id)
    return [materialize(p, identity.subject_id, owned=True) for p in projects]


@projects_router.get("/favorites/my", response_model=list[ProjectView])
def list_my_favorites(
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    projects = db.find_projects_favorited_by(identity.subject_id)
    return [materialize(p, identity.subject_id) for p in projects]


@projects_router.get("/{project_id}/comments", response_model=list[CommentResponse])
def list_comments(project_id: str, db: DbClient = Depends(get_db_client)):
    project = _load_project(db, project_id)
    return [materialize_comment(c) for c in newest_first(project.comments)]


@projects_router.post(
    "/{project_id}/comments",
    response_model=list[CommentResponse],
    status_code=201,
)
def post_comment(
    project_id: str,
    payload: CommentPayload,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    project = _load_project(db, project_id)
    project.comments, comment = append_comment(project.comments, identity, payload.text)
    db.save_project(project)
    logger.info(
        "Comment %s added to project %s by %s",
        comment.comment_id,
        project_id,
        identity.subject_id,
    )
    return [materialize_comment(c) for c in project.comments]


@projects_router.delete(
    "/{project_id}/comments/{comment_id}", response_model=MessageResponse
)
def delete_comment(
    project_id: str,
    comment_id: str,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    project = _load_project(db, project_id)
    project.comments = remove_comment(project, comment_id, identity.subject_id)
    db.save_project(project)
    logger.info(
        "Comment %s removed from project %s by %s",
        comment_id,
        project_id,
        identity.subject_id,
    )
    return MessageResponse(message="Comment deleted successfully")


@projects_router.get("", response_model=ProjectPageResponse)
def list_projects(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings_dep),
):
    limit = limit or settings.default_page_size
    if limit > settings.max_page_size:
        raise InvalidInput(f"limit must be at most {settings.max_page_size}")
    projects, total = db.find_projects_page((page - 1) * limit, limit)
    requester_id = _requester_id(identity)
    return ProjectPageResponse(
        projects=[materialize(p, requester_id) for p in projects],
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_projects=total,
    )


@projects_router.post("", response_model=ProjectView, status_code=201)
def create_project(
    payload: ProjectPayload,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    profile = db.get_profile(identity.subject_id)
    if not can_create_project(profile):
        raise Forbidden("Complete your profile (name & bio) before adding a project.")

    project = Project(
        project_id=uuid4().hex,
        owner_id=identity.subject_id,
        title=payload.title,
        description=payload.description,
        tags=payload.tags,
        github_link=payload.github_link,
        live_demo=payload.live_demo,
        author_name=profile.name,
        author_bio=profile.bio,
    )
    db.save_project(project)
    logger.info("Project %s created by %s", project.project_id, identity.subject_id)
    return materialize(project, identity.subject_id)


@projects_router.get("/{project_id}", response_model=ProjectView)
def get_project(
    project_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: DbClient = Depends(get_db_client),
):
    project = _load_project(db, project_id)
    return materialize(project, _requester_id(identity))


@projects_router.put("/{project_id}", response_model=ProjectUpdateResponse)
def update_project(
    project_id: str,
    payload: ProjectPayload,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    project = _load_project(db, project_id)
    if not can_edit_project(project, identity.subject_id):
        raise Forbidden("You cannot edit this project.")

    project.title = payload.title
    project.description = payload.description
    project.tags = payload.tags
    project.github_link = payload.github_link
    project.live_demo = payload.live_demo
    db.save_project(project)
    logger.info("Project %s updated by %s", project_id, identity.subject_id)
    return ProjectUpdateResponse(
        message="Project updated",
        project=materialize(project, identity.subject_id),
    )


@projects_router.post("/{project_id}/like", response_model=LikeResponse)
def like_project(
    project_id: str,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    project = _load_project(db, project_id)
    project.liked_by, liked = toggle_membership(project.liked_by, identity.subject_id)
    db.save_project(project)
    return LikeResponse(likes=len(project.liked_by), liked=liked)


@projects_router.post("/{project_id}/favorite", response_model=FavoriteResponse)
def favorite_project(
    project_id: str,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    project = _load_project(db, project_id)
    project.favorited_by, favorited = toggle_membership(
        project.favorited_by, identity.subject_id
    )
    db.save_project(project)
    return FavoriteResponse(favorited=favorited, project_id=project.project_id)


@projects_router.post("/{project_id}/rate", response_model=RateResponse)
def rate_project(
    project_id: str,
    payload: RatePayload,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    validate_rating(payload.value)
    project = _load_project(db, project_id)
    project.ratings = apply_rating(project.ratings, identity.subject_id, payload.value)
    db.save_project(project)
    return RateResponse(
        average_rating=average_rating(project.ratings),
        user_rating=payload.value,
    )


def _user_overview(
    profile: Profile, db: DbClient, requester_id: Optional[str]
) -> UserOverviewResponse:
    projects = db.find_projects_by_owner(profile.subject_id)
    return UserOverviewResponse(
        profile=materialize_profile(profile),
        total_projects=len(projects),
        total_likes=sum(len(p.liked_by) for p in projects),
        total_comments=sum(len(p.comments) for p in projects),
        projects=[materialize(p, requester_id) for p in projects],
    )


@users_router.get("/me", response_model=UserOverviewResponse)
def get_my_profile(
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    profile = db.get_profile(identity.subject_id)
    if profile is None:
        profile = db.upsert_profile(
            identity.subject_id,
            email=identity.email,
            name=identity.name or "",
            bio="",
        )
        logger.info("Created profile for %s", identity.subject_id)
    return _user_overview(profile, db, identity.subject_id)


@users_router.put("/me", response_model=ProfileResponse)
def update_my_profile(
    payload: ProfileUpdatePayload,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    profile = db.upsert_profile(
        identity.subject_id,
        email=identity.email,
        name=payload.name,
        bio=payload.bio,
    )
    return materialize_profile(profile)


@users_router.get("/{subject_id}", response_model=UserOverviewResponse)
def get_user_profile(
    subject_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: DbClient = Depends(get_db_client),
):
    profile = db.get_profile(subject_id)
    if profile is None:
        raise NotFound("User profile not found")
    return _user_overview(profile, db, _requester_id(identity))
