import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .cipher import Mode
from .config import CipherSettings
from .core import transform

logger = logging.getLogger(__name__)

ENC_SUFFIX = ".enc"
DEC_SUFFIX = ".dec"


def validate_password(password) -> None:
    if password is None or len(password) == 0:
        raise ValueError("Password must not be empty.")


def default_output_path(in_path, mode: Mode, out_dir=None) -> Path:
    """``a.txt -> a.txt.enc`` when encrypting, ``a.txt.enc -> a.txt`` (else ``.dec``) when decrypting."""
    in_path = Path(in_path)
    out_dir = Path(out_dir) if out_dir is not None else in_path.parent
    if mode is Mode.ENCRYPT:
        return out_dir / (in_path.name + ENC_SUFFIX)
    if in_path.suffix.lower() == ENC_SUFFIX and in_path.stem:
        return out_dir / in_path.stem
    return out_dir / (in_path.name + DEC_SUFFIX)


def _write_replace(out_path: Path, data: bytes):
    """Write to a sibling temp file, then move it over out_path."""
    fd, tmp = tempfile.mkstemp(prefix=f".{out_path.name}.", suffix=".tmp", dir=out_path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, out_path)
    except OSError:
        logger.debug("write to %s failed, removing %s", out_path, tmp)
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def _process(mode: Mode, in_path, out_path, password, settings: Optional[CipherSettings]) -> Path:
    in_path = Path(in_path)
    out_path = Path(out_path)
    validate_password(password)

    if not in_path.exists() or not in_path.is_file():
        raise FileNotFoundError(f"Cannot open input file: {in_path}")
    data = in_path.read_bytes()
    logger.info("%s %s (%d bytes) -> %s", mode.value, in_path, len(data), out_path)

    # nothing touches out_path unless the transform succeeded
    out = transform(password, mode, data, settings).unwrap()
    _write_replace(out_path, out)
    return out_path


def encrypt_file(in_path, out_path, password, settings: Optional[CipherSettings] = None) -> Path:
    return _process(Mode.ENCRYPT, in_path, out_path, password, settings)


def decrypt_file(in_path, out_path, password, settings: Optional[CipherSettings] = None) -> Path:
    return _process(Mode.DECRYPT, in_path, out_path, password, settings)
