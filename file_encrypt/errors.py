class CoreError(Exception):
    """Base class for every failure of the encrypt/decrypt pipeline."""


class KeyDerivationError(CoreError):
    pass


class InvalidKeyOrIVLength(CoreError):
    pass


class CipherInitError(CoreError):
    pass


class CipherUpdateError(CoreError):
    pass


class PaddingError(CoreError):
    """Bad PKCS#7 padding: wrong password, or corrupted/truncated ciphertext."""
