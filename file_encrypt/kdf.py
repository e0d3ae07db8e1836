"""Password to AES-256 key, PBKDF2-HMAC-SHA256."""
import logging

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .config import KEY_LEN, PBKDF2_ITER
from .errors import KeyDerivationError

logger = logging.getLogger(__name__)

backend = default_backend()


def wipe_buffer(buf: bytearray):
    """Overwrite a mutable buffer with zeros in place."""
    for i in range(len(buf)):
        buf[i] = 0


class DerivedKey:
    """Key material that is zeroed when the owner is done with it.

    Use as a context manager so the buffer is wiped on every exit path::

        with derive_key(b"secret") as key:
            ...

    Python cannot scrub the immutable ``bytes`` the KDF hands back; only this
    mutable copy is wiped.
    """

    def __init__(self, material: bytes):
        self._buf = bytearray(material)
        self._wiped = False

    @property
    def material(self) -> bytearray:
        if self._wiped:
            raise RuntimeError("key material has been wiped")
        return self._buf

    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self):
        wipe_buffer(self._buf)
        self._wiped = True

    def __len__(self):
        return len(self._buf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()
        return False

    def __repr__(self):
        state = "wiped" if self._wiped else "live"
        return f"<DerivedKey {len(self._buf)} bytes, {state}>"


def _as_bytes(name: str, value) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise KeyDerivationError(f"{name} must be str or bytes, not {type(value).__name__}")


def derive_key(password, *, salt: bytes = b"", iterations: int = PBKDF2_ITER,
               length: int = KEY_LEN) -> DerivedKey:
    pw = _as_bytes("password", password)
    salt = _as_bytes("salt", salt)
    if not pw:
        raise KeyDerivationError("Password must not be empty.")
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise KeyDerivationError(f"iterations must be a positive integer, got {iterations!r}")
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise KeyDerivationError(f"key length must be a positive integer, got {length!r}")

    logger.debug("PBKDF2-HMAC-SHA256: iterations=%d, length=%d, salt_len=%d", iterations, length, len(salt))
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt,
            iterations=iterations,
            backend=backend,
        )
        return DerivedKey(kdf.derive(pw))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyDerivationError(f"Error generating key from password: {e}") from e
