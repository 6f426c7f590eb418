"""
Profile and project stores: a SQLAlchemy implementation and an in-memory one
for development and tests.
"""

from __future__ import annotations

import copy
from datetime import timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import (
    JSON,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.types import Profile, Project, utc_now


class DbClient(Protocol):
    """Interface for profile and project persistence."""

    def get_profile(self, subject_id: str) -> Optional[Profile]:
        ...

    def upsert_profile(
        self,
        subject_id: str,
        *,
        email: Optional[str] = None,
        name: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Profile:
        ...

    def get_project(self, project_id: str) -> Optional[Project]:
        ...

    def find_projects_by_owner(self, subject_id: str) -> list[Project]:
        ...

    def find_projects_favorited_by(self, subject_id: str) -> list[Project]:
        ...

    def find_projects_page(self, offset: int, limit: int) -> tuple[list[Project], int]:
        ...

    def save_project(self, project: Project) -> Project:
        ...


def _apply_profile_fields(
    profile: Profile,
    email: Optional[str],
    name: Optional[str],
    bio: Optional[str],
) -> None:
    if email is not None:
        profile.email = email
    if name is not None:
        profile.name = name
    if bio is not None:
        profile.bio = bio
    profile.updated_at = utc_now()


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.profiles: Dict[str, Profile] = {}
        self.projects: Dict[str, Project] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.profiles.clear()
        self.projects.clear()

    def get_profile(self, subject_id: str) -> Optional[Profile]:
        profile = self.profiles.get(subject_id)
        return copy.deepcopy(profile) if profile else None

    def upsert_profile(
        self,
        subject_id: str,
        *,
        email: Optional[str] = None,
        name: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Profile:
        profile = self.profiles.get(subject_id)
        if profile is None:
            profile = Profile(subject_id=subject_id, email=email)
            self.profiles[subject_id] = profile
        _apply_profile_fields(profile, email, name, bio)
        return copy.deepcopy(profile)

    def get_project(self, project_id: str) -> Optional[Project]:
        project = self.projects.get(project_id)
        return copy.deepcopy(project) if project else None

    def _newest_first(self, projects: list[Project]) -> list[Project]:
        # Reversing insertion order first keeps the latest insert ahead on ties.
        ordered = sorted(
            reversed(projects), key=lambda p: p.created_at, reverse=True
        )
        return [copy.deepcopy(p) for p in ordered]

    def find_projects_by_owner(self, subject_id: str) -> list[Project]:
        return self._newest_first(
            [p for p in self.projects.values() if p.owner_id == subject_id]
        )

    def find_projects_favorited_by(self, subject_id: str) -> list[Project]:
        return self._newest_first(
            [p for p in self.projects.values() if subject_id in p.favorited_by]
        )

    def find_projects_page(self, offset: int, limit: int) -> tuple[list[Project], int]:
        ordered = self._newest_first(list(self.projects.values()))
        return ordered[offset : offset + limit], len(ordered)

    def save_project(self, project: Project) -> Project:
        project.updated_at = utc_now()
        self.projects[project.project_id] = copy.deepcopy(project)
        return project


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Projects are stored whole as JSON documents; favorites are mirrored into an
    association table so they can be queried by subject id.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get_profile(self, subject_id: str) -> Optional[Profile]:
        with self.Session() as session:
            row = session.get(ProfileRow, subject_id)
            return Profile.from_dict(row.data) if row else None

    def upsert_profile(
        self,
        subject_id: str,
        *,
        email: Optional[str] = None,
        name: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Profile:
        with self.Session() as session:
            row = session.get(ProfileRow, subject_id)
            if row:
                profile = Profile.from_dict(row.data)
            else:
                profile = Profile(subject_id=subject_id, email=email)
                row = ProfileRow(subject_id=subject_id)
                session.add(row)
            _apply_profile_fields(profile, email, name, bio)
            row.email = profile.email
            row.data = profile.as_dict()
            session.commit()
            return profile

    def get_project(self, project_id: str) -> Optional[Project]:
        with self.Session() as session:
            row = session.execute(
                select(ProjectRow).where(ProjectRow.project_id == project_id)
            ).scalar_one_or_none()
            return Project.from_dict(row.document) if row else None

    def _newest_first(self, stmt):
        return stmt.order_by(ProjectRow.created_at.desc(), ProjectRow.pk.desc())

    def find_projects_by_owner(self, subject_id: str) -> list[Project]:
        with self.Session() as session:
            stmt = self._newest_first(
                select(ProjectRow).where(ProjectRow.owner_id == subject_id)
            )
            rows = session.execute(stmt).scalars().all()
            return [Project.from_dict(row.document) for row in rows]

    def find_projects_favorited_by(self, subject_id: str) -> list[Project]:
        with self.Session() as session:
            stmt = self._newest_first(
                select(ProjectRow)
                .join(FavoriteRow, FavoriteRow.project_id == ProjectRow.project_id)
                .where(FavoriteRow.subject_id == subject_id)
            )
            rows = session.execute(stmt).scalars().all()
            return [Project.from_dict(row.document) for row in rows]

    def find_projects_page(self, offset: int, limit: int) -> tuple[list[Project], int]:
        with self.Session() as session:
            total = session.execute(
                select(func.count()).select_from(ProjectRow)
            ).scalar_one()
            if offset >= total:
                # Past the last page; offsets this large can overflow the driver.
                return [], total
            stmt = self._newest_first(select(ProjectRow)).offset(offset).limit(limit)
            rows = session.execute(stmt).scalars().all()
            return [Project.from_dict(row.document) for row in rows], total

    def save_project(self, project: Project) -> Project:
        project.updated_at = utc_now()
        with self.Session() as session:
            row = session.execute(
                select(ProjectRow).where(ProjectRow.project_id == project.project_id)
            ).scalar_one_or_none()
            if row is None:
                row = ProjectRow(
                    project_id=project.project_id,
                    created_at=project.created_at.astimezone(timezone.utc).timestamp(),
                )
                session.add(row)
            row.owner_id = project.owner_id
            row.document = project.as_dict()
            session.flush()
            session.execute(
                delete(FavoriteRow).where(FavoriteRow.project_id == project.project_id)
            )
            for subject_id in project.favorited_by:
                session.add(
                    FavoriteRow(project_id=project.project_id, subject_id=subject_id)
                )
            session.commit()
            return project


Base = declarative_base()


class ProfileRow(Base):
    __tablename__ = "profiles"

    subject_id = Column(String, primary_key=True)
    email = Column(String, nullable=True, unique=True)
    data = Column("profile", JSON, nullable=False)


class ProjectRow(Base):
    __tablename__ = "projects"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String, nullable=False, unique=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    created_at = Column(Float, nullable=False, index=True)
    document = Column(JSON, nullable=False)


class FavoriteRow(Base):
    __tablename__ = "project_favorites"

    project_id = Column(
        String, ForeignKey("projects.project_id"), primary_key=True
    )
    subject_id = Column(String, primary_key=True, index=True)
