"""
Session tokens: symmetric key management and encrypted claims.

Tokens are PASETO v4.local: the JSON claims are encrypted and authenticated
under a single 32-byte secret per process, so the payload is both confidential
and tamper-evident. The key is persisted as raw bytes so that tokens survive
restarts.
"""

import base64
import binascii
import logging
import os
import tempfile
import threading
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Protocol

import pyseto
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pyseto import Key, PysetoError

from gatekeeper.core.errors import (
    DecryptionFailed,
    KeySizeInvalid,
    TokenExpired,
    TokenNotYetValid,
)

logger = logging.getLogger(__name__)

KEY_SIZE = 32
PASETO_VERSION = 4
TOKEN_PREFIX = "v4.local."
# v4.local body: 32-byte nonce, ciphertext, 32-byte BLAKE2b tag.
MIN_BODY_SIZE = 32 + 32
DEFAULT_TOKEN_TTL = timedelta(minutes=15)


class Claims(BaseModel):
    """Authenticated token payload. Field aliases are the wire names."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", description="User id as a decimal string")
    username: str
    email: str
    exp: int = Field(default=0, description="Expires at (Unix seconds)")
    iat: int = Field(default=0, description="Issued at (Unix seconds)")
    nbf: int = Field(default=0, description="Not valid before (Unix seconds)")

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not (v.isascii() and v.isdigit()) or int(v) <= 0:
            raise ValueError("userId must be a positive decimal integer")
        return str(int(v))

    def identity(self) -> tuple[str, str, str]:
        """Claims without the validity window."""
        return (self.user_id, self.username, self.email)


def _check_key_size(key: bytes) -> bytes:
    if len(key) != KEY_SIZE:
        raise KeySizeInvalid(f"incorrect key size: expected {KEY_SIZE} bytes, got {len(key)}")
    return key


class KeySource(Protocol):
    def get_or_create(self) -> bytes: ...

    def load(self) -> bytes | None: ...


class StaticKey:
    """Key held in memory only; useful for tests and for keys supplied by a secret manager."""

    def __init__(self, key: bytes) -> None:
        self._key = key

    def get_or_create(self) -> bytes:
        return _check_key_size(self._key)

    def load(self) -> bytes | None:
        return _check_key_size(self._key)


class KeyStore:
    """
    Single-writer key artifact.

    The first call that needs a key either loads the file or generates and
    persists a new key; afterwards the key is cached and never rewritten for
    the life of the process. A new key is written to a temporary file and
    hard-linked into place, so the artifact is never visible half-written.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._key: bytes | None = None
        self._lock = threading.Lock()

    def _read(self) -> bytes:
        self._key = _check_key_size(self.path.read_bytes())
        logger.info("Loaded token key from %s", self.path)
        return self._key

    def load(self) -> bytes | None:
        """Return the key if the artifact exists, otherwise None."""
        if self._key is not None:
            return self._key
        with self._lock:
            if self._key is None and self.path.exists():
                self._read()
            return self._key

    def get_or_create(self) -> bytes:
        """Return the key, generating and persisting it on first use."""
        if self._key is not None:
            return self._key
        with self._lock:
            if self._key is not None:
                return self._key
            if self.path.exists():
                return self._read()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            key = ChaCha20Poly1305.generate_key()
            # mkstemp creates the file with mode 0600.
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(key)
                    fh.flush()
                    os.fsync(fh.fileno())
                try:
                    os.link(tmp_name, self.path)
                except FileExistsError:
                    # Another process published its key first.
                    return self._read()
            finally:
                os.unlink(tmp_name)
            logger.info("Generated new token key at %s", self.path)
            self._key = key
            return self._key


def _body_size(token: str) -> int:
    body = token[len(TOKEN_PREFIX):]
    padding = "=" * (-len(body) % 4)
    return len(base64.urlsafe_b64decode(body + padding))


def _paseto_key(key: bytes) -> Key:
    return Key.new(version=PASETO_VERSION, purpose="local", key=_check_key_size(key))


class TokenCodec:
    """Issue and verify encrypted claims tokens."""

    def __init__(
        self,
        key_source: KeySource,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._key_source = key_source
        self._ttl_seconds = int(ttl.total_seconds())
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def issue(self, claims: Claims) -> str:
        """Stamp iat/nbf/exp onto a copy of the claims and encrypt them."""
        key = _paseto_key(self._key_source.get_or_create())
        now = self._now()
        stamped = claims.model_copy(
            update={"iat": now, "nbf": now, "exp": now + self._ttl_seconds}
        )
        payload = stamped.model_dump_json(by_alias=True).encode("utf-8")
        # pyseto draws a fresh random nonce per call.
        return pyseto.encode(key, payload).decode("ascii")

    def verify(self, token: str) -> Claims:
        """Decrypt, authenticate and time-check a token. Fails closed."""
        raw_key = self._key_source.load()
        if raw_key is None:
            raise DecryptionFailed("token cannot be decrypted: no key has been issued")
        key = _paseto_key(raw_key)

        if not isinstance(token, str) or not token.startswith(TOKEN_PREFIX):
            raise DecryptionFailed("malformed token")
        try:
            if _body_size(token) < MIN_BODY_SIZE:
                raise DecryptionFailed("malformed token")
        except (binascii.Error, ValueError) as e:
            raise DecryptionFailed("malformed token") from e

        try:
            decoded = pyseto.decode(key, token)
        except (PysetoError, ValueError) as e:
            raise DecryptionFailed("token authentication failed") from e
        try:
            claims = Claims.model_validate_json(decoded.payload)
        except ValidationError as e:
            raise DecryptionFailed("token payload is invalid") from e

        now = self._now()
        if now < claims.nbf:
            raise TokenNotYetValid("token is not valid yet")
        if now > claims.exp:
            raise TokenExpired("token is expired")
        return claims
