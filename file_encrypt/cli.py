from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from .config import CipherSettings, IVMode
from .errors import CoreError
from .files import decrypt_file, encrypt_file

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="file-encrypt",
        description="Encrypt or decrypt a file with a password (PBKDF2-HMAC-SHA256 + AES-256-CBC).",
    )
    op = p.add_mutually_exclusive_group(required=True)
    op.add_argument("-e", dest="encrypt", action="store_true", help="Encrypt the file")
    op.add_argument("-d", dest="decrypt", action="store_true", help="Decrypt the file")

    p.add_argument("-p", dest="password", type=str, help="Password (prompted for when omitted)")
    p.add_argument("-i", dest="input", required=True, help="Input file path")
    p.add_argument("-o", dest="output", required=True, help="Output file path")

    p.add_argument("--iterations", type=int, default=None, help="PBKDF2 iterations (default 10000)")
    p.add_argument(
        "--iv-mode",
        choices=[m.value for m in IVMode],
        default=None,
        help="zero: legacy raw ciphertext, zero IV, no header (default); "
             "random: salt and IV stored in a header",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return p


def _settings(args: argparse.Namespace) -> CipherSettings:
    base = CipherSettings.from_env()
    return CipherSettings(
        iterations=args.iterations if args.iterations is not None else base.iterations,
        iv_mode=IVMode(args.iv_mode) if args.iv_mode else base.iv_mode,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = _settings(args)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
    if not password or not args.input or not args.output:
        parser.print_usage(sys.stderr)
        print("Error: password, input and output must not be empty", file=sys.stderr)
        return EXIT_USAGE

    op = encrypt_file if args.encrypt else decrypt_file
    try:
        op(args.input, args.output, password, settings)
    except CoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
