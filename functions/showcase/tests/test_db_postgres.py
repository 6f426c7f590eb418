import unittest
from datetime import datetime, timedelta, timezone

from showcase.db import InMemoryDbClient, PostgresDbClient
from showcase.mutations import append_comment, apply_rating
from shared.types import Identity, Project

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class StoreContractMixin:
    """Behaviour shared by every DbClient implementation."""

    def make_db(self):
        raise NotImplementedError

    def setUp(self):
        self.db = self.make_db()

    def _project(self, project_id, owner_id="owner", minutes=0, **fields):
        return Project(
            project_id=project_id,
            owner_id=owner_id,
            title=f"Project {project_id}",
            created_at=BASE_TIME + timedelta(minutes=minutes),
            **fields,
        )

    def test_profile_upsert(self):
        self.assertIsNone(self.db.get_profile("u1"))
        created = self.db.upsert_profile("u1", email="u1@example.com", name="", bio="")
        self.assertFalse(created.is_complete)

        updated = self.db.upsert_profile("u1", name="Ann", bio="Dev")
        self.assertTrue(updated.is_complete)
        fetched = self.db.get_profile("u1")
        self.assertEqual(fetched.email, "u1@example.com")
        self.assertEqual(fetched.name, "Ann")
        self.assertEqual(fetched.created_at, created.created_at)

    def test_project_document_roundtrip(self):
        project = self._project("p1", tags=["a", "b"], liked_by=["x"])
        project.comments, _ = append_comment(
            [], Identity("x", "x@example.com"), "hello", BASE_TIME
        )
        project.ratings = apply_rating([], "x", 4)
        self.db.save_project(project)

        loaded = self.db.get_project("p1")
        self.assertEqual(loaded.tags, ["a", "b"])
        self.assertEqual(loaded.liked_by, ["x"])
        self.assertEqual(loaded.comments[0].text, "hello")
        self.assertEqual(loaded.comments[0].created_at, BASE_TIME)
        self.assertEqual(loaded.ratings[0].value, 4)
        self.assertIsNone(self.db.get_project("missing"))

    def test_page_is_newest_first(self):
        for i in range(5):
            self.db.save_project(self._project(f"p{i}", minutes=i))
        projects, total = self.db.find_projects_page(1, 2)
        self.assertEqual(total, 5)
        self.assertEqual([p.project_id for p in projects], ["p3", "p2"])

    def test_page_past_the_end_is_empty(self):
        self.db.save_project(self._project("p1"))
        projects, total = self.db.find_projects_page(10**20, 9)
        self.assertEqual(projects, [])
        self.assertEqual(total, 1)

    def test_find_by_owner(self):
        self.db.save_project(self._project("p1", owner_id="a", minutes=0))
        self.db.save_project(self._project("p2", owner_id="b", minutes=1))
        self.db.save_project(self._project("p3", owner_id="a", minutes=2))
        owned = self.db.find_projects_by_owner("a")
        self.assertEqual([p.project_id for p in owned], ["p3", "p1"])

    def test_find_favorited_tracks_saves(self):
        project = self._project("p1", favorited_by=["fan"])
        self.db.save_project(project)
        self.assertEqual(
            [p.project_id for p in self.db.find_projects_favorited_by("fan")], ["p1"]
        )

        project.favorited_by = []
        self.db.save_project(project)
        self.assertEqual(self.db.find_projects_favorited_by("fan"), [])

    def test_last_save_wins(self):
        self.db.save_project(self._project("p1"))
        first = self.db.get_project("p1")
        second = self.db.get_project("p1")
        first.liked_by.append("a")
        second.liked_by.append("b")
        self.db.save_project(first)
        self.db.save_project(second)
        self.assertEqual(self.db.get_project("p1").liked_by, ["b"])


class InMemoryDbClientTests(StoreContractMixin, unittest.TestCase):
    def make_db(self):
        return InMemoryDbClient()

    def test_reset(self):
        self.db.save_project(self._project("p1"))
        self.db.upsert_profile("u1", email="u1@example.com")
        self.db.reset()
        self.assertIsNone(self.db.get_project("p1"))
        self.assertIsNone(self.db.get_profile("u1"))

    def test_returned_records_are_copies(self):
        self.db.save_project(self._project("p1"))
        loaded = self.db.get_project("p1")
        loaded.liked_by.append("x")
        self.assertEqual(self.db.get_project("p1").liked_by, [])


class PostgresDbClientTests(StoreContractMixin, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def make_db(self):
        return PostgresDbClient("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            PostgresDbClient("")


if __name__ == "__main__":
    unittest.main()
