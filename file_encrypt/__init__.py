"""
Password-based file encryption: PBKDF2-HMAC-SHA256 key derivation and
AES-256-CBC with PKCS#7 padding, whole file in memory.
"""

from .cipher import BlockCipherTransform, Mode
from .config import CipherSettings, IVMode
from .core import Result, decrypt, encrypt, transform
from .errors import (
    CipherInitError,
    CipherUpdateError,
    CoreError,
    InvalidKeyOrIVLength,
    KeyDerivationError,
    PaddingError,
)
from .files import decrypt_file, encrypt_file
from .kdf import DerivedKey, derive_key

__all__ = [
    "BlockCipherTransform",
    "Mode",
    "CipherSettings",
    "IVMode",
    "Result",
    "encrypt",
    "decrypt",
    "transform",
    "encrypt_file",
    "decrypt_file",
    "DerivedKey",
    "derive_key",
    "CoreError",
    "KeyDerivationError",
    "InvalidKeyOrIVLength",
    "CipherInitError",
    "CipherUpdateError",
    "PaddingError",
]
