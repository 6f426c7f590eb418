"""
Pure in-memory mutations applied to a loaded project before it is saved.

None of these touch the store. Handlers load a project, apply one of these and
save the result, so two concurrent requests against the same project can
overwrite each other (last save wins).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from showcase.errors import Forbidden, InvalidRating, NotFound
from showcase.guards import can_delete_comment
from shared.types import Comment, Identity, Project, Rating, utc_now

MIN_RATING = 1
MAX_RATING = 5


def toggle_membership(members: list[str], subject_id: str) -> tuple[list[str], bool]:
    """
    Add subject_id if absent, remove it if present.

    Returns the new member list and whether subject_id is now a member.
    """
    if subject_id in members:
        return [member for member in members if member != subject_id], False
    return [*members, subject_id], True


def validate_rating(value: int) -> None:
    if isinstance(value, bool) or not MIN_RATING <= value <= MAX_RATING:
        raise InvalidRating()


def apply_rating(ratings: list[Rating], rater_id: str, value: int) -> list[Rating]:
    """Insert or replace the rater's entry. An existing entry keeps its position."""
    validate_rating(value)

    updated: list[Rating] = []
    replaced = False
    for rating in ratings:
        if rating.rater_id == rater_id:
            updated.append(Rating(rater_id=rater_id, value=value))
            replaced = True
        else:
            updated.append(rating)
    if not replaced:
        updated.append(Rating(rater_id=rater_id, value=value))
    return updated


def average_rating(ratings: list[Rating]) -> float:
    """
    Mean of all rating values rounded half-up to one decimal, 0 when unrated.

    The mean is taken in Decimal so halves such as 1.25 round to 1.3 rather
    than following binary float rounding.
    """
    if not ratings:
        return 0
    mean = Decimal(sum(rating.value for rating in ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def user_rating(ratings: list[Rating], rater_id: Optional[str]) -> int:
    if rater_id is None:
        return 0
    for rating in ratings:
        if rating.rater_id == rater_id:
            return rating.value
    return 0


def append_comment(
    comments: list[Comment],
    author: Identity,
    text: str,
    now: datetime | None = None,
) -> tuple[list[Comment], Comment]:
    comment = Comment(
        comment_id=uuid.uuid4().hex,
        author_id=author.subject_id,
        author_email=author.email,
        text=text,
        created_at=now or utc_now(),
    )
    return [*comments, comment], comment


def find_comment(project: Project, comment_id: str) -> Optional[Comment]:
    for comment in project.comments:
        if comment.comment_id == comment_id:
            return comment
    return None


def remove_comment(
    project: Project, comment_id: str, requester_id: Optional[str]
) -> list[Comment]:
    comment = find_comment(project, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    if not can_delete_comment(project, comment, requester_id):
        raise Forbidden()
    return [c for c in project.comments if c.comment_id != comment_id]


def newest_first(comments: list[Comment]) -> list[Comment]:
    return sorted(comments, key=lambda comment: comment.created_at, reverse=True)
