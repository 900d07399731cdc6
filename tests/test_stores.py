"""Store tests against an in-memory SQLite schema."""

import unittest

from gatekeeper.core.errors import BadRequestError, DuplicateKeyError, NotFoundError
from gatekeeper.stores import PermissionStore, RoleStore, UserStore
from gatekeeper.stores.base import MAX_ID, require_id
from support import make_test_db

HASH = "$2b$04$abcdefghijklmnopqrstuuZ3wXcSeP7J8rQ1q0c1Yk5qGmXbQy1nG"


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, factory = make_test_db()
        self.session = factory()

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()


class TestRequireId(unittest.TestCase):
    def test_accepts_positive_ints(self) -> None:
        self.assertEqual(require_id(1, "user id"), 1)
        self.assertEqual(require_id(MAX_ID, "user id"), MAX_ID)

    def test_rejects_invalid(self) -> None:
        for bad in (0, -1, MAX_ID + 1, "1", None, True, 1.0):
            with self.subTest(value=bad), self.assertRaises(BadRequestError):
                require_id(bad, "user id")


class TestUserStore(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.users = UserStore(self.session, default_page_size=2)

    def test_create_sanitizes_input(self) -> None:
        user = self.users.create("  alice  ", " Alice@Example.COM ", HASH)
        self.assertIsNotNone(user.id)
        self.assertEqual(user.username, "alice")
        self.assertEqual(user.email, "alice@example.com")
        self.assertIsNotNone(user.created_at)
        self.assertIsNone(user.deleted_at)

    def test_create_validation(self) -> None:
        cases = [
            ("", "a@b.c", HASH),
            ("   ", "a@b.c", HASH),
            ("x" * 256, "a@b.c", HASH),
            ("bob", "not-an-email", HASH),
            ("bob", "@b.c", HASH),
            ("bob", "a@b.c", ""),
        ]
        for username, email, digest in cases:
            with self.subTest(username=username[:10], email=email), self.assertRaises(BadRequestError):
                self.users.create(username, email, digest)

    def test_duplicate_username_and_email(self) -> None:
        self.users.create("alice", "alice@example.com", HASH)
        with self.assertRaises(DuplicateKeyError):
            self.users.create("alice", "other@example.com", HASH)
        with self.assertRaises(DuplicateKeyError):
            self.users.create("alice2", "ALICE@example.com", HASH)

    def test_lookups(self) -> None:
        created = self.users.create("alice", "alice@example.com", HASH)
        self.assertEqual(self.users.get_by_id(created.id).username, "alice")
        self.assertEqual(self.users.get_by_username(" alice ").id, created.id)
        self.assertEqual(self.users.get_by_email("ALICE@example.com").id, created.id)
        with self.assertRaises(NotFoundError):
            self.users.get_by_id(created.id + 1)
        with self.assertRaises(NotFoundError):
            self.users.get_by_username("bob")

    def test_update_replaces_fields(self) -> None:
        user = self.users.create("alice", "alice@example.com", HASH)
        updated = self.users.update(user.id, "alice", "new@example.com", HASH + "x")
        self.assertEqual(updated.email, "new@example.com")
        self.assertEqual(updated.password_hash, HASH + "x")

    def test_update_conflicts_with_other_user(self) -> None:
        self.users.create("alice", "alice@example.com", HASH)
        bob = self.users.create("bob", "bob@example.com", HASH)
        with self.assertRaises(DuplicateKeyError):
            self.users.update(bob.id, "alice", "bob@example.com", HASH)

    def test_update_missing_user(self) -> None:
        with self.assertRaises(NotFoundError):
            self.users.update(42, "alice", "alice@example.com", HASH)

    def test_soft_delete_hides_and_frees_username(self) -> None:
        user = self.users.create("alice", "alice@example.com", HASH)
        self.users.delete(user.id)
        with self.assertRaises(NotFoundError):
            self.users.get_by_id(user.id)
        self.assertEqual(self.users.count(), 0)
        again = self.users.create("alice", "alice@example.com", HASH)
        self.assertNotEqual(again.id, user.id)

    def test_delete_twice(self) -> None:
        user = self.users.create("alice", "alice@example.com", HASH)
        self.users.delete(user.id)
        with self.assertRaises(NotFoundError):
            self.users.delete(user.id)

    def test_list_pages_in_id_order(self) -> None:
        for name in ("u1", "u2", "u3"):
            self.users.create(name, f"{name}@example.com", HASH)
        self.assertEqual([u.username for u in self.users.list()], ["u1", "u2"])
        self.assertEqual([u.username for u in self.users.list(1)], ["u3"])
        self.assertEqual([u.username for u in self.users.list(-4, 10)], ["u1", "u2", "u3"])
        self.assertEqual(self.users.list(5, 10), [])
        self.assertEqual(self.users.count(), 3)

    def test_search_is_case_insensitive_substring(self) -> None:
        self.users.create("Alice", "alice@example.com", HASH)
        self.users.create("bob", "bob@corp.io", HASH)
        self.assertEqual([u.username for u in self.users.search("LIC")], ["Alice"])
        self.assertEqual([u.username for u in self.users.search("corp")], ["bob"])
        self.assertEqual(self.users.search("100%"), [])

    def test_search_escapes_wildcards(self) -> None:
        self.users.create("a_b", "ab@example.com", HASH)
        self.users.create("axb", "axb@example.com", HASH)
        self.assertEqual([u.username for u in self.users.search("a_b")], ["a_b"])


class TestRoleStore(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.roles = RoleStore(self.session)

    def test_create_and_get(self) -> None:
        role = self.roles.create("  admin ")
        self.assertEqual(role.name, "admin")
        self.assertEqual(self.roles.get_by_name("admin").id, role.id)

    def test_name_length(self) -> None:
        with self.assertRaises(BadRequestError):
            self.roles.create("ab")
        with self.assertRaises(BadRequestError):
            self.roles.create("r" * 256)

    def test_duplicate_name(self) -> None:
        self.roles.create("admin")
        with self.assertRaises(DuplicateKeyError):
            self.roles.create("admin")

    def test_rename_and_conflict(self) -> None:
        admin = self.roles.create("admin")
        self.roles.create("editor")
        self.assertEqual(self.roles.update(admin.id, "root").name, "root")
        self.assertEqual(self.roles.update(admin.id, "root").name, "root")
        with self.assertRaises(DuplicateKeyError):
            self.roles.update(admin.id, "editor")

    def test_deleted_name_can_be_reused(self) -> None:
        role = self.roles.create("admin")
        self.roles.delete(role.id)
        with self.assertRaises(NotFoundError):
            self.roles.get_by_name("admin")
        self.assertNotEqual(self.roles.create("admin").id, role.id)


class TestPermissionStore(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.permissions = PermissionStore(self.session)

    def test_names_are_lower_cased(self) -> None:
        permission = self.permissions.create(" Users:Write ")
        self.assertEqual(permission.name, "users:write")
        self.assertEqual(self.permissions.get_by_name("USERS:WRITE").id, permission.id)

    def test_single_character_name(self) -> None:
        self.assertEqual(self.permissions.create("r").name, "r")

    def test_empty_name(self) -> None:
        with self.assertRaises(BadRequestError):
            self.permissions.create("   ")

    def test_duplicate_ignores_case(self) -> None:
        self.permissions.create("read")
        with self.assertRaises(DuplicateKeyError):
            self.permissions.create("READ")

    def test_list_and_count(self) -> None:
        for name in ("a", "b", "c"):
            self.permissions.create(name)
        self.assertEqual([p.name for p in self.permissions.list(0, 2)], ["a", "b"])
        self.assertEqual(self.permissions.count(), 3)


if __name__ == "__main__":
    unittest.main()
