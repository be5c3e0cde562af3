from __future__ import annotations

import tests._path_setup  # noqa: F401

import io
import logging
import os
import stat
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from crtfile import __version__, cli


def _perm(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class CliBehaviorTest(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.dir = Path(self._td.name)
        self._old_umask = os.umask(0o022)
        env = {k: v for k, v in os.environ.items() if not k.startswith("CRTFILE_")}
        self._patches = [
            patch.dict(os.environ, env, clear=True),
            patch("crtfile.config.Path.home", return_value=self.dir / "home"),
            patch("crtfile.config.Path.cwd", return_value=self.dir),
        ]
        for p in self._patches:
            p.start()
        logging.getLogger("crtfile").handlers.clear()

    def tearDown(self) -> None:
        logging.getLogger("crtfile").handlers.clear()
        for p in reversed(self._patches):
            p.stop()
        os.umask(self._old_umask)
        self._td.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            rc = cli.run(list(argv))
        return rc, out.getvalue(), err.getvalue()

    def _path(self, name: str) -> str:
        return str(self.dir / name)

    def test_default_mode_is_all_read_write_filtered_by_umask(self) -> None:
        rc, out, err = self._run(self._path("f"))
        self.assertEqual(rc, 0)
        self.assertEqual((out, err), ("", ""))
        self.assertEqual(_perm(self.dir / "f"), 0o644)

    def test_absolute_applies_mask_literally(self) -> None:
        rc, _, _ = self._run("-A", "-a", "rw", self._path("f"))
        self.assertEqual(rc, 0)
        self.assertEqual(_perm(self.dir / "f"), 0o666)

    def test_repeated_subject_flags_are_or_ed(self) -> None:
        rc, _, _ = self._run("-u", "r", "--user", "w", self._path("f"))
        self.assertEqual(rc, 0)
        self.assertEqual(_perm(self.dir / "f"), 0o600)

    def test_options_and_files_may_be_intermixed(self) -> None:
        rc, _, _ = self._run("-u", "rw", self._path("a"), "-g", "r", self._path("b"))
        self.assertEqual(rc, 0)
        self.assertEqual(_perm(self.dir / "a"), 0o640)
        self.assertEqual(_perm(self.dir / "b"), 0o640)

    def test_attached_short_option_argument(self) -> None:
        rc, _, _ = self._run("-urwx", "-Agrx", self._path("f"))
        self.assertEqual(rc, 0)
        self.assertEqual(_perm(self.dir / "f"), 0o750)

    def test_invalid_letter_is_fatal_and_touches_nothing(self) -> None:
        rc, out, err = self._run("-u", "rz", self._path("f"))
        self.assertEqual(rc, 1)
        self.assertEqual(out, "")
        self.assertEqual(err, "crtfile: unrecognized permission 'z' in 'rz'\n")
        self.assertFalse((self.dir / "f").exists())

    def test_mode_flag_without_bits_is_fatal(self) -> None:
        rc, _, err = self._run("-u", "", self._path("f"))
        self.assertEqual(rc, 1)
        self.assertEqual(err, "crtfile: permission not set\n")
        self.assertFalse((self.dir / "f").exists())

    def test_missing_operand(self) -> None:
        rc, _, err = self._run("-u", "rw")
        self.assertEqual(rc, 1)
        self.assertEqual(err, "crtfile: missing operand\n")

    def test_no_arguments_at_all(self) -> None:
        rc, _, err = self._run()
        self.assertEqual(rc, 1)
        self.assertTrue(err.startswith("crtfile: missing operand"))
        self.assertEqual(len(err.splitlines()), 1)

    def test_unknown_option_is_fatal(self) -> None:
        rc, _, err = self._run("-z", self._path("f"))
        self.assertEqual(rc, 1)
        self.assertTrue(err.startswith("crtfile: "))
        self.assertIn("-z", err)
        self.assertEqual(len(err.splitlines()), 1)
        self.assertFalse((self.dir / "f").exists())

    def test_option_missing_argument_is_fatal(self) -> None:
        rc, _, err = self._run(self._path("f"), "-g")
        self.assertEqual(rc, 1)
        self.assertEqual(err, "crtfile: argument -g/--group: expected one argument\n")
        self.assertFalse((self.dir / "f").exists())

    def test_help_exits_zero(self) -> None:
        rc, out, err = self._run("--help")
        self.assertEqual(rc, 0)
        self.assertEqual(err, "")
        self.assertIn("usage: crtfile [OPTION]... [MODE]... FILE...", out)
        self.assertIn("--truncate", out)
        self.assertIn("'([ugoa][rwx]+)+'", out)

    def test_version_exits_zero(self) -> None:
        rc, out, _ = self._run("--version")
        self.assertEqual(rc, 0)
        self.assertEqual(out.splitlines()[0], f"crtfile {__version__}")
        self.assertIn("Copyright (C) 2023 Arka Mondal", out)

    def test_partial_failure_reports_and_continues(self) -> None:
        (self.dir / "b").write_text("x", encoding="utf-8")
        rc, out, err = self._run("-v", self._path("a"), self._path("b"), self._path("c"))
        self.assertEqual(rc, 1)
        self.assertEqual(
            out.splitlines(),
            [f"file: '{self._path('a')}': created", f"file: '{self._path('c')}': created"],
        )
        self.assertEqual(err, f"crtfile: file: '{self._path('b')}': File exists\n")
        self.assertTrue((self.dir / "a").exists())
        self.assertTrue((self.dir / "c").exists())

    def test_truncate_keeps_permissions(self) -> None:
        target = self.dir / "t"
        target.write_text("content", encoding="utf-8")
        os.chmod(target, 0o600)
        rc, out, _ = self._run("-t", "-v", "-a", "rwx", str(target))
        self.assertEqual(rc, 0)
        self.assertEqual(out, f"file: '{target}': truncated\n")
        self.assertEqual(target.stat().st_size, 0)
        self.assertEqual(_perm(target), 0o600)

    def test_truncate_missing_file_fails(self) -> None:
        rc, _, err = self._run("-t", self._path("missing"))
        self.assertEqual(rc, 1)
        self.assertIn("No such file or directory", err)
        self.assertFalse((self.dir / "missing").exists())

    def test_verbose_from_environment(self) -> None:
        with patch.dict(os.environ, {"CRTFILE_VERBOSE": "1"}):
            rc, out, _ = self._run(self._path("f"))
        self.assertEqual(rc, 0)
        self.assertEqual(out, f"file: '{self._path('f')}': created\n")

    def test_broken_config_is_fatal_before_touching_files(self) -> None:
        (self.dir / ".crtfile.json").write_text("{oops", encoding="utf-8")
        rc, _, err = self._run(self._path("f"))
        self.assertEqual(rc, 1)
        self.assertTrue(err.startswith("crtfile: cannot read config"))
        self.assertFalse((self.dir / "f").exists())

    def test_project_config_cannot_bypass_umask(self) -> None:
        (self.dir / ".crtfile.json").write_text('{"absolute": true}', encoding="utf-8")
        rc, _, err = self._run(self._path("plain"))
        self.assertEqual(rc, 0)
        self.assertEqual(_perm(self.dir / "plain"), 0o644)
        self.assertIn("crtfile: ignoring 'absolute'", err)

    def test_bad_log_file_value_is_one_line_fatal(self) -> None:
        (self.dir / ".crtfile.json").write_text('{"log_file": 5}', encoding="utf-8")
        rc, _, err = self._run(self._path("x"))
        self.assertEqual(rc, 1)
        self.assertEqual(err, "crtfile: config value 'log_file' must be a path, got int\n")
        self.assertFalse((self.dir / "x").exists())

    def test_log_file_records_outcomes(self) -> None:
        log_file = self.dir / "crtfile.log"
        (self.dir / "b").touch()
        with patch.dict(os.environ, {"CRTFILE_LOG_FILE": str(log_file)}):
            rc, _, err = self._run(self._path("a"), self._path("b"))
        for h in logging.getLogger("crtfile").handlers:
            h.flush()
        self.assertEqual(rc, 1)
        content = log_file.read_text(encoding="utf-8")
        self.assertIn(f"file: '{self._path('a')}': created rw-rw-rw-", content)
        self.assertIn(f"file: '{self._path('b')}': create_exclusive failed: File exists", content)
        self.assertEqual(len(err.splitlines()), 1)

    def test_invalid_mode_before_help_is_fatal(self) -> None:
        rc, out, err = self._run("-u", "rz", "--help")
        self.assertEqual(rc, 1)
        self.assertEqual(out, "")
        self.assertEqual(err, "crtfile: unrecognized permission 'z' in 'rz'\n")

    def test_help_before_invalid_mode_wins(self) -> None:
        rc, out, err = self._run("--help", "-u", "rz")
        self.assertEqual(rc, 0)
        self.assertIn("usage: crtfile", out)
        self.assertEqual(err, "")

    def test_invalid_mode_reported_before_missing_operand(self) -> None:
        rc, _, err = self._run("-g", "q")
        self.assertEqual(rc, 1)
        self.assertEqual(err, "crtfile: unrecognized permission 'q' in 'q'\n")


if __name__ == "__main__":
    unittest.main()
