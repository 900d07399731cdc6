"""Tests for the create_user bootstrap script."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from gatekeeper.scripts.create_user import main
from gatekeeper.services import AuthorizationService, DirectoryService
from support import make_test_db


class TestCreateUserScript(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, self.factory = make_test_db()

    def tearDown(self) -> None:
        self.engine.dispose()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv), session_factory=self.factory)
        return code, out.getvalue(), err.getvalue()

    def test_creates_admin_and_role(self) -> None:
        code, out, _ = self._run("root", "root@example.com", "secret1", "--role", "admin")
        self.assertEqual(code, 0)
        self.assertIn("Created role 'admin'", out)
        user = DirectoryService(self.factory).get_user_by_username("root")
        self.assertTrue(AuthorizationService(self.factory).user_has_role(user.id, "admin"))

    def test_reuses_existing_role(self) -> None:
        DirectoryService(self.factory).create_role("admin")
        code, out, _ = self._run("root", "root@example.com", "secret1", "--role", "admin")
        self.assertEqual(code, 0)
        self.assertNotIn("Created role", out)

    def test_without_role(self) -> None:
        code, out, _ = self._run("alice", "alice@example.com", "secret1")
        self.assertEqual(code, 0)
        self.assertIn("Created user 'alice'", out)

    def test_duplicate_user_fails(self) -> None:
        self._run("alice", "alice@example.com", "secret1")
        code, _, err = self._run("alice", "other@example.com", "secret1")
        self.assertEqual(code, 1)
        self.assertIn("DuplicateKey", err)

    def test_short_password_fails(self) -> None:
        code, _, err = self._run("alice", "alice@example.com", "123")
        self.assertEqual(code, 1)
        self.assertIn("BadRequest", err)


if __name__ == "__main__":
    unittest.main()
