import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from file_encrypt import CipherSettings, IVMode, Mode, PaddingError, decrypt_file, encrypt_file
from file_encrypt.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, main as cli_main
from file_encrypt.files import default_output_path, validate_password


class FileLayerTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.src = self.tmp / "plain.txt"
        self.src.write_bytes(b"hello secure world")

    def tearDown(self):
        self._tmp.cleanup()

    def test_roundtrip(self):
        enc = encrypt_file(self.src, self.tmp / "plain.txt.enc", "pw")
        self.assertEqual(enc.stat().st_size, 32)
        out = decrypt_file(enc, self.tmp / "back.txt", "pw")
        self.assertEqual(out.read_bytes(), b"hello secure world")

    def test_roundtrip_random_mode(self):
        settings = CipherSettings(iterations=1000, iv_mode=IVMode.RANDOM)
        enc = encrypt_file(self.src, self.tmp / "a.enc", "pw", settings)
        out = decrypt_file(enc, self.tmp / "a.out", "pw", settings)
        self.assertEqual(out.read_bytes(), b"hello secure world")

    def test_failed_decrypt_writes_nothing(self):
        bogus = self.tmp / "bogus.enc"
        bogus.write_bytes(b"\x00" * 15)
        target = self.tmp / "never.txt"
        with self.assertRaises(PaddingError):
            decrypt_file(bogus, target, "pw")
        self.assertFalse(target.exists())

    def test_failed_write_keeps_existing_output(self):
        target = self.tmp / "plain.txt.enc"
        target.write_bytes(b"previous contents")
        with mock.patch("file_encrypt.files.os.replace", side_effect=OSError(28, "No space left on device")):
            with self.assertRaises(OSError):
                encrypt_file(self.src, target, "pw")
        self.assertEqual(target.read_bytes(), b"previous contents")
        self.assertEqual(sorted(p.name for p in self.tmp.iterdir()), ["plain.txt", "plain.txt.enc"])

    def test_overwrites_existing_output(self):
        target = self.tmp / "plain.txt.enc"
        target.write_bytes(b"stale")
        encrypt_file(self.src, target, "pw")
        self.assertEqual(decrypt_file(target, self.tmp / "back", "pw").read_bytes(), b"hello secure world")
        self.assertEqual(sorted(p.name for p in self.tmp.iterdir()), ["back", "plain.txt", "plain.txt.enc"])

    def test_missing_input(self):
        with self.assertRaises(FileNotFoundError):
            encrypt_file(self.tmp / "nope.bin", self.tmp / "x.enc", "pw")

    def test_empty_password(self):
        with self.assertRaises(ValueError):
            validate_password("")
        with self.assertRaises(ValueError):
            encrypt_file(self.src, self.tmp / "x.enc", "")

    def test_default_output_path(self):
        self.assertEqual(default_output_path("d/a.txt", Mode.ENCRYPT), Path("d/a.txt.enc"))
        self.assertEqual(default_output_path("d/a.txt.enc", Mode.DECRYPT), Path("d/a.txt"))
        self.assertEqual(default_output_path("d/a.bin", Mode.DECRYPT), Path("d/a.bin.dec"))
        self.assertEqual(default_output_path("d/a.txt", Mode.ENCRYPT, "out"), Path("out/a.txt.enc"))


class CLITests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.src = os.path.join(self.tmp, "in.txt")
        with open(self.src, "wb") as f:
            f.write(b"hello world")

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, argv):
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            rc = cli_main(argv)
        return rc, err.getvalue()

    def test_encrypt_then_decrypt(self):
        enc = os.path.join(self.tmp, "in.txt.enc")
        back = os.path.join(self.tmp, "back.txt")
        rc, _ = self._run(["-e", "-p", "hunter2", "-i", self.src, "-o", enc])
        self.assertEqual(rc, EXIT_OK)
        self.assertEqual(os.path.getsize(enc), 16)
        rc, _ = self._run(["-d", "-p", "hunter2", "-i", enc, "-o", back])
        self.assertEqual(rc, EXIT_OK)
        with open(back, "rb") as f:
            self.assertEqual(f.read(), b"hello world")

    def test_random_iv_mode_flag(self):
        enc = os.path.join(self.tmp, "in.enc")
        back = os.path.join(self.tmp, "back.txt")
        common = ["-p", "pw", "--iv-mode", "random", "--iterations", "1000"]
        self.assertEqual(self._run(["-e", *common, "-i", self.src, "-o", enc])[0], EXIT_OK)
        self.assertEqual(os.path.getsize(enc), 36 + 16)
        self.assertEqual(self._run(["-d", *common, "-i", enc, "-o", back])[0], EXIT_OK)
        with open(back, "rb") as f:
            self.assertEqual(f.read(), b"hello world")

    def test_corrupt_input_exit_code(self):
        bogus = os.path.join(self.tmp, "bogus.enc")
        with open(bogus, "wb") as f:
            f.write(b"\x00" * 17)
        out = os.path.join(self.tmp, "out.txt")
        rc, err = self._run(["-d", "-p", "pw", "-i", bogus, "-o", out])
        self.assertEqual(rc, EXIT_FAILURE)
        self.assertIn("Error", err)
        self.assertFalse(os.path.exists(out))

    def test_missing_input_exit_code(self):
        rc, err = self._run(["-e", "-p", "pw", "-i", os.path.join(self.tmp, "nope"), "-o", "x"])
        self.assertEqual(rc, EXIT_FAILURE)
        self.assertIn("Cannot open input file", err)

    def test_usage_errors(self):
        for argv in (
            ["-p", "pw", "-i", "a", "-o", "b"],
            ["-e", "-d", "-p", "pw", "-i", "a", "-o", "b"],
            ["-e", "-p", "pw", "-i", "a"],
            ["-e", "--iv-mode", "ecb", "-p", "pw", "-i", "a", "-o", "b"],
        ):
            with self.subTest(argv=argv):
                with self.assertRaises(SystemExit) as cm:
                    self._run(argv)
                self.assertEqual(cm.exception.code, EXIT_USAGE)

    def test_empty_password_is_usage_error(self):
        rc, _ = self._run(["-e", "-p", "", "-i", self.src, "-o", os.path.join(self.tmp, "x")])
        self.assertEqual(rc, EXIT_USAGE)

    def test_bad_iterations_is_usage_error(self):
        rc, _ = self._run(["-e", "-p", "pw", "--iterations", "0", "-i", self.src, "-o", "x"])
        self.assertEqual(rc, EXIT_USAGE)

    def test_password_prompt(self):
        enc = os.path.join(self.tmp, "in.txt.enc")
        with mock.patch("file_encrypt.cli.getpass.getpass", return_value="hunter2") as prompt:
            rc, _ = self._run(["-e", "-i", self.src, "-o", enc])
        self.assertEqual(rc, EXIT_OK)
        prompt.assert_called_once()


if __name__ == "__main__":
    unittest.main(verbosity=2)
