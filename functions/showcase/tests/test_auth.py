import threading
import time
import unittest
from unittest.mock import MagicMock, patch

from firebase_admin import auth as firebase_auth

from showcase.auth import (
    FirebaseIdentityVerifier,
    StaticIdentityVerifier,
    parse_bearer_token,
)
from shared.types import Identity


class ParseBearerTokenTests(unittest.TestCase):
    def test_valid_header(self):
        self.assertEqual(parse_bearer_token("Bearer abc"), "abc")
        self.assertEqual(parse_bearer_token("bearer abc"), "abc")

    def test_missing_or_malformed(self):
        for header in (None, "", "Bearer", "Token abc", "Bearer a b"):
            with self.subTest(header=header):
                self.assertIsNone(parse_bearer_token(header))


class FirebaseIdentityVerifierTests(unittest.TestCase):
    def setUp(self):
        self.app = MagicMock()
        self.verifier = FirebaseIdentityVerifier(app=self.app)

    @patch("showcase.auth.firebase_auth.verify_id_token")
    def test_valid_token(self, mock_verify):
        mock_verify.return_value = {
            "uid": "firebase-uid",
            "email": "dev@example.com",
            "name": "Dev",
        }
        identity = self.verifier.verify("token")
        self.assertEqual(identity, Identity("firebase-uid", "dev@example.com", "Dev"))
        mock_verify.assert_called_once_with("token", app=self.app)

    @patch("showcase.auth.firebase_auth.verify_id_token")
    def test_invalid_token(self, mock_verify):
        mock_verify.side_effect = firebase_auth.InvalidIdTokenError("bad token")
        with self.assertLogs("showcase.auth", level="WARNING"):
            self.assertIsNone(self.verifier.verify("token"))

    @patch("showcase.auth.firebase_auth.verify_id_token")
    def test_malformed_token(self, mock_verify):
        mock_verify.side_effect = ValueError("Illegal ID token provided")
        with self.assertLogs("showcase.auth", level="WARNING"):
            self.assertIsNone(self.verifier.verify(""))

    @patch("showcase.auth.firebase_admin.initialize_app")
    @patch("showcase.auth.firebase_admin.get_app")
    def test_app_initialized_lazily(self, mock_get_app, mock_initialize):
        mock_get_app.side_effect = ValueError("no app")
        verifier = FirebaseIdentityVerifier(project_id="demo-project")
        mock_initialize.assert_not_called()

        with patch("showcase.auth.firebase_auth.verify_id_token") as mock_verify:
            mock_verify.return_value = {"uid": "u"}
            identity = verifier.verify("token")

        self.assertEqual(identity.subject_id, "u")
        self.assertIsNone(identity.email)
        mock_initialize.assert_called_once_with(
            None, {"projectId": "demo-project"}, name="showcase"
        )

    @patch("showcase.auth.firebase_auth.verify_id_token")
    @patch("showcase.auth.firebase_admin.initialize_app")
    @patch("showcase.auth.firebase_admin.get_app")
    def test_concurrent_first_requests_initialize_once(
        self, mock_get_app, mock_initialize, mock_verify
    ):
        created = {}
        app = MagicMock()

        def get_app(name):
            if name not in created:
                raise ValueError("no app")
            return created[name]

        def initialize_app(credential, options, name):
            if name in created:
                raise ValueError("already exists")
            time.sleep(0.05)
            created[name] = app
            return app

        mock_get_app.side_effect = get_app
        mock_initialize.side_effect = initialize_app
        mock_verify.return_value = {"uid": "u"}

        verifiers = [FirebaseIdentityVerifier() for _ in range(4)]
        barrier = threading.Barrier(len(verifiers))
        results = []

        def call(verifier):
            barrier.wait()
            results.append(verifier.verify("token"))

        threads = [threading.Thread(target=call, args=(v,)) for v in verifiers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(mock_initialize.call_count, 1)
        self.assertEqual([r.subject_id for r in results], ["u"] * len(verifiers))


class StaticIdentityVerifierTests(unittest.TestCase):
    def test_known_and_unknown_tokens(self):
        verifier = StaticIdentityVerifier()
        verifier.add("t1", Identity("u1", "u1@example.com"))
        self.assertEqual(verifier.verify("t1").subject_id, "u1")
        with self.assertLogs("showcase.auth", level="WARNING"):
            self.assertIsNone(verifier.verify("t2"))


if __name__ == "__main__":
    unittest.main()
