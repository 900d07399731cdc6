"""Test settings: in-memory SQLite and a throwaway key file, set before gatekeeper is imported."""

import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault(
    "TOKEN_KEY_FILE",
    os.path.join(tempfile.mkdtemp(prefix="gatekeeper-test-"), "keyfile"),
)
os.environ.setdefault("BCRYPT_ROUNDS", "4")
