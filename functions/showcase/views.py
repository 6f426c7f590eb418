"""
Turns stored records into response objects with requester-specific fields.
"""

from __future__ import annotations

from typing import Optional

from showcase.mutations import average_rating, user_rating
from showcase.schemas import (
    CommentResponse,
    ProfileResponse,
    ProjectView,
    RatingResponse,
)
from shared.types import Profile, Project


def materialize(
    project: Project, requester_id: Optional[str] = None, *, owned: bool = False
) -> ProjectView:
    """
    Build the view of a project for requester_id (None for anonymous callers).

    owned=True is the "my projects" listing, where the owner is always shown
    as having liked their own project whatever likedBy holds.
    """
    if owned:
        liked = True
    else:
        liked = requester_id is not None and requester_id in project.liked_by
    favorited = requester_id is not None and requester_id in project.favorited_by

    return ProjectView(
        id=project.project_id,
        title=project.title,
        description=project.description,
        tags=list(project.tags),
        github_link=project.github_link,
        live_demo=project.live_demo,
        owner_id=project.owner_id,
        author_name=project.author_name,
        author_bio=project.author_bio,
        liked_by=list(project.liked_by),
        favorited_by=list(project.favorited_by),
        comments=[materialize_comment(c) for c in project.comments],
        ratings=[
            RatingResponse(rater_id=r.rater_id, value=r.value) for r in project.ratings
        ],
        created_at=project.created_at,
        updated_at=project.updated_at,
        likes=len(project.liked_by),
        comment_count=len(project.comments),
        average_rating=average_rating(project.ratings),
        user_rating=user_rating(project.ratings, requester_id),
        liked_by_current_user=liked,
        favorited_by_current_user=favorited,
    )


def materialize_comment(comment) -> CommentResponse:
    return CommentResponse(
        comment_id=comment.comment_id,
        author_id=comment.author_id,
        author_email=comment.author_email,
        text=comment.text,
        created_at=comment.created_at,
    )


def materialize_profile(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        subject_id=profile.subject_id,
        email=profile.email,
        name=profile.name,
        bio=profile.bio,
        is_complete=profile.is_complete,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
