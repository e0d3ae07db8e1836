import os
from dataclasses import dataclass
from enum import Enum

# -------------------- Parameters --------------------
KEY_LEN = 32  # AES-256
IV_LEN = 16
BLOCK_SIZE = 16  # AES block, bytes
BLOCK_BITS = BLOCK_SIZE * 8
PBKDF2_ITER = 10_000

# Salted container only
MAGIC = b"FEC1"
SALT_LEN = 16
HEADER_LEN = len(MAGIC) + SALT_LEN + IV_LEN

ZERO_IV = bytes(IV_LEN)

ENV_ITERATIONS = "FILE_ENCRYPT_ITERATIONS"
ENV_IV_MODE = "FILE_ENCRYPT_IV_MODE"


class IVMode(str, Enum):
    """How the IV and salt are chosen.

    ZERO is the legacy OpenSSL-style layout: no salt, all-zero IV,
    raw ciphertext. RANDOM writes ``MAGIC || salt || iv || ciphertext`` with a
    fresh salt and IV per file.
    """

    ZERO = "zero"
    RANDOM = "random"


@dataclass(frozen=True)
class CipherSettings:
    iterations: int = PBKDF2_ITER
    iv_mode: IVMode = IVMode.ZERO

    def __post_init__(self):
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int):
            raise ValueError("iterations must be an integer")
        if self.iterations < 1:
            raise ValueError("iterations must be positive")
        # accept plain strings from config sources
        object.__setattr__(self, "iv_mode", IVMode(self.iv_mode))

    @classmethod
    def from_env(cls, environ=None) -> "CipherSettings":
        env = os.environ if environ is None else environ
        kwargs = {}
        raw_iter = env.get(ENV_ITERATIONS)
        if raw_iter:
            try:
                kwargs["iterations"] = int(raw_iter)
            except ValueError:
                raise ValueError(f"{ENV_ITERATIONS} must be an integer, got {raw_iter!r}") from None
        raw_mode = env.get(ENV_IV_MODE)
        if raw_mode:
            try:
                kwargs["iv_mode"] = IVMode(raw_mode.strip().lower())
            except ValueError:
                choices = ", ".join(m.value for m in IVMode)
                raise ValueError(f"{ENV_IV_MODE} must be one of {choices}, got {raw_mode!r}") from None
        return cls(**kwargs)
