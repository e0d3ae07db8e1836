"""
Password-based encryption of an in-memory buffer.

Pipeline: password -> PBKDF2-HMAC-SHA256 key -> AES-256-CBC + PKCS#7.

Output format depends on ``CipherSettings.iv_mode``:

  zero (default)   raw ciphertext, zero IV, no salt. Same bytes as the
                   output of ``openssl``-based file_encrypt 1.x.
  random           [4 bytes]  magic: b'FEC1'
                   [16]       salt
                   [16]       IV
                   [...]      ciphertext

``encrypt``/``decrypt`` raise :class:`~file_encrypt.errors.CoreError`.
``transform`` is the boundary used by the front ends and returns a
:class:`Result` instead of raising.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

from .cipher import BlockCipherTransform, Mode
from .config import HEADER_LEN, IV_LEN, MAGIC, SALT_LEN, ZERO_IV, CipherSettings, IVMode
from .errors import CoreError, PaddingError
from .kdf import derive_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Result:
    data: Optional[bytes] = None
    error: Optional[CoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self.data


def pack_container(salt: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    if len(salt) != SALT_LEN or len(iv) != IV_LEN:
        raise ValueError("salt and IV must be 16 bytes each")
    return MAGIC + salt + iv + ciphertext


def unpack_container(blob: bytes) -> Tuple[bytes, bytes, bytes]:
    if len(blob) < HEADER_LEN:
        raise PaddingError("File too small or invalid format")
    if blob[:len(MAGIC)] != MAGIC:
        raise PaddingError("Invalid file format (bad magic)")
    salt_end = len(MAGIC) + SALT_LEN
    return blob[len(MAGIC):salt_end], blob[salt_end:HEADER_LEN], blob[HEADER_LEN:]


def _run(password, mode: Mode, data: bytes, salt: bytes, iv: bytes, iterations: int) -> bytes:
    with derive_key(password, salt=salt, iterations=iterations) as key:
        return BlockCipherTransform(mode, key.material, iv).run(data)


def encrypt(password, data: bytes, settings: Optional[CipherSettings] = None) -> bytes:
    settings = settings or CipherSettings()
    logger.debug("encrypt: %d bytes, iv_mode=%s", len(data), settings.iv_mode.value)
    if settings.iv_mode is IVMode.RANDOM:
        salt = secrets.token_bytes(SALT_LEN)
        iv = secrets.token_bytes(IV_LEN)
        ct = _run(password, Mode.ENCRYPT, data, salt, iv, settings.iterations)
        return pack_container(salt, iv, ct)
    return _run(password, Mode.ENCRYPT, data, b"", ZERO_IV, settings.iterations)


def decrypt(password, data: bytes, settings: Optional[CipherSettings] = None) -> bytes:
    settings = settings or CipherSettings()
    logger.debug("decrypt: %d bytes, iv_mode=%s", len(data), settings.iv_mode.value)
    if settings.iv_mode is IVMode.RANDOM:
        salt, iv, ct = unpack_container(data)
        return _run(password, Mode.DECRYPT, ct, salt, iv, settings.iterations)
    return _run(password, Mode.DECRYPT, data, b"", ZERO_IV, settings.iterations)


def transform(password, mode: Mode, data: bytes, settings: Optional[CipherSettings] = None) -> Result:
    if not isinstance(mode, Mode):
        raise TypeError(f"mode must be a Mode, not {type(mode).__name__}")
    op = encrypt if mode is Mode.ENCRYPT else decrypt
    try:
        return Result(data=op(password, data, settings))
    except CoreError as e:
        logger.debug("%s failed: %s: %s", mode.value, type(e).__name__, e)
        return Result(error=e)
