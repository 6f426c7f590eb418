# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from dacite import Config, from_dict

DACITE_CONFIG = Config(type_hooks={datetime: datetime.fromisoformat})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_json(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    return value


def is_profile_complete(name: Optional[str], bio: Optional[str]) -> bool:
    """Both name and bio must be non-empty once surrounding whitespace is removed."""
    return bool(name and name.strip()) and bool(bio and bio.strip())


@dataclass
class Identity:
    """A verified caller, as returned by the identity provider."""

    subject_id: str
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass
class Profile:
    """One profile per subject id."""

    subject_id: str
    email: Optional[str]
    name: str = ""
    bio: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def is_complete(self) -> bool:
        return is_profile_complete(self.name, self.bio)

    def as_dict(self) -> dict:
        return _to_json(asdict(self))

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return from_dict(cls, data, config=DACITE_CONFIG)


@dataclass
class Comment:
    """A comment embedded in a project."""

    comment_id: str
    author_id: str
    author_email: Optional[str]
    text: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Rating:
    """A single rater's star value. At most one per rater on a project."""

    rater_id: str
    value: int


@dataclass
class Project:
    """A showcased project with its embedded likes, favorites, comments and ratings."""

    project_id: str
    owner_id: str
    title: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    github_link: str = ""
    live_demo: str = ""
    # Snapshot of the owner's profile when the project was created.
    author_name: str = ""
    author_bio: str = ""
    liked_by: List[str] = field(default_factory=list)
    favorited_by: List[str] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    ratings: List[Rating] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return _to_json(asdict(self))

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return from_dict(cls, data, config=DACITE_CONFIG)
