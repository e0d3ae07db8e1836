"""AES-256-CBC with PKCS#7 padding over a whole in-memory buffer.

A :class:`BlockCipherTransform` is built fresh for every operation and walks a
small state machine::

    INIT --update()--> UPDATED --finalize()--> DONE

Output is held back until :meth:`BlockCipherTransform.finalize` succeeds, so a
failed decryption never hands out partial plaintext. ``close()`` (or leaving
the ``with`` block) drops the cipher context and clears buffered output on
every exit path.
"""
import logging
from enum import Enum

from cryptography.exceptions import AlreadyFinalized, UnsupportedAlgorithm
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .config import BLOCK_BITS, IV_LEN, KEY_LEN
from .errors import CipherInitError, CipherUpdateError, InvalidKeyOrIVLength, PaddingError
from .kdf import wipe_buffer

logger = logging.getLogger(__name__)

backend = default_backend()


class Mode(str, Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class State(str, Enum):
    INIT = "init"
    UPDATED = "updated"
    DONE = "done"


class BlockCipherTransform:
    def __init__(self, mode: Mode, key, iv: bytes):
        if not isinstance(mode, Mode):
            raise TypeError(f"mode must be a Mode, not {type(mode).__name__}")
        if len(key) != KEY_LEN:
            raise InvalidKeyOrIVLength(f"AES-256 requires a {KEY_LEN}-byte key, got {len(key)}")
        if len(iv) != IV_LEN:
            raise InvalidKeyOrIVLength(f"CBC requires a {IV_LEN}-byte IV, got {len(iv)}")

        self.mode = mode
        self._out = bytearray()
        try:
            cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=backend)
            if mode is Mode.ENCRYPT:
                self._ctx = cipher.encryptor()
                self._pad = padding.PKCS7(BLOCK_BITS).padder()
            else:
                self._ctx = cipher.decryptor()
                self._pad = padding.PKCS7(BLOCK_BITS).unpadder()
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CipherInitError(f"Cannot initialise AES-256-CBC: {e}") from e
        self._state = State.INIT

    @property
    def state(self) -> State:
        return self._state

    def update(self, data: bytes) -> None:
        """Feed the whole input buffer.

        Returns nothing: output is buffered and released only by finalize(),
        so a failed decryption never exposes plaintext.
        """
        if self._state is not State.INIT:
            raise CipherUpdateError(f"update() called in state {self._state.value}")
        try:
            if self.mode is Mode.ENCRYPT:
                self._out += self._ctx.update(self._pad.update(data))
            else:
                self._out += self._pad.update(self._ctx.update(data))
        except (ValueError, TypeError, AlreadyFinalized) as e:
            self.close()
            raise CipherUpdateError(f"Cipher update failed: {e}") from e
        self._state = State.UPDATED

    def finalize(self) -> bytes:
        if self._state is State.DONE:
            raise CipherUpdateError("finalize() called on a finished transform")
        if self._state is State.INIT:
            self.update(b"")
        try:
            if self.mode is Mode.ENCRYPT:
                self._out += self._ctx.update(self._pad.finalize())
                self._out += self._ctx.finalize()
            else:
                try:
                    tail = self._ctx.finalize()
                except ValueError as e:
                    # partial trailing block
                    raise PaddingError(f"Ciphertext is truncated or corrupted: {e}") from e
                self._out += self._pad.update(tail)
                try:
                    self._out += self._pad.finalize()
                except ValueError as e:
                    raise PaddingError("Invalid padding: wrong password or corrupted ciphertext") from e
            result = bytes(self._out)
        except PaddingError:
            self.close()
            raise
        except (ValueError, TypeError, AlreadyFinalized) as e:
            self.close()
            raise CipherUpdateError(f"Cipher finalisation failed: {e}") from e
        self.close()
        return result

    def run(self, data: bytes) -> bytes:
        with self:
            self.update(data)
            return self.finalize()

    def close(self):
        wipe_buffer(self._out)
        self._out = bytearray()
        self._ctx = None
        self._pad = None
        self._state = State.DONE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
