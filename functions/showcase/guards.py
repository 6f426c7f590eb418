"""
Authorization predicates. Each returns a plain bool and never raises; callers
decide how a denial is reported.
"""

from __future__ import annotations

from typing import Optional

from shared.types import Comment, Profile, Project, is_profile_complete


def can_edit_project(project: Project, requester_id: Optional[str]) -> bool:
    return requester_id is not None and requester_id == project.owner_id


def can_delete_comment(
    project: Project, comment: Comment, requester_id: Optional[str]
) -> bool:
    if requester_id is None:
        return False
    return requester_id == comment.author_id or requester_id == project.owner_id


def can_create_project(profile: Optional[Profile]) -> bool:
    if profile is None:
        return False
    return is_profile_complete(profile.name, profile.bio)
