"""CLI for crtfile."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from . import __version__
from . import config as cfg
from .errors import CrtfileError, UsageError
from .logging_setup import configure
from .materialize import CreateMode, materialize
from .permissions import ModeSpec, Subject, format_mask, resolve, resolve_specs
from .report import PROG, console, emit_error

logger = logging.getLogger(__name__)

VERSION_BANNER = f"""{PROG} {__version__}
Copyright (C) 2023 Arka Mondal
License: GNU GPL version 3
This program comes with ABSOLUTELY NO WARRANTY.
This is free software, and you are welcome to redistribute it under certain conditions.
To learn more see https://www.gnu.org/licenses/gpl-3.0.html"""

EPILOG = """MODE letters:
  r  read
  w  write
  x  execute

With no MODE, -a rw is used. Each MODE is of the form '([ugoa][rwx]+)+'.
Options are read left to right: an invalid MODE before --help or --version
is reported as an error.
Mandatory arguments to long options are mandatory for short options too."""

_SUBJECT_FLAGS: list[tuple[str, str, Subject, str]] = [
    ("-u", "--user", Subject.USER, "owner"),
    ("-g", "--group", Subject.GROUP, "group"),
    ("-o", "--other", Subject.OTHER, "other"),
    ("-a", "--all", Subject.ALL, "owner, group and other"),
]


class _EarlyExit(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise UsageError(message)


class _AppendModeSpec(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None):
        subject = Subject(self.const)
        resolve(values, subject)
        specs = list(getattr(namespace, self.dest, None) or [])
        specs.append(ModeSpec(subject, values))
        setattr(namespace, self.dest, specs)


class _ShowHelp(argparse.Action):
    def __init__(self, option_strings, dest=argparse.SUPPRESS, help=None):
        super().__init__(option_strings, dest=dest, default=argparse.SUPPRESS, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        console.print(parser.format_help().rstrip("\n"), markup=False)
        raise _EarlyExit(0)


class _ShowVersion(argparse.Action):
    def __init__(self, option_strings, dest=argparse.SUPPRESS, help=None):
        super().__init__(option_strings, dest=dest, default=argparse.SUPPRESS, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        console.print(VERSION_BANNER, markup=False)
        raise _EarlyExit(0)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        usage="%(prog)s [OPTION]... [MODE]... FILE...",
        description="Create each FILE with the permissions given by MODE.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("-t", "--truncate", action="store_true",
                        help="truncate existing file(s) instead of creating")
    parser.add_argument("-A", "--absolute", action="store_true",
                        help="ignore the umask when creating")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="print one line per file processed")
    parser.add_argument("--help", action=_ShowHelp,
                        help="show this help and exit")
    parser.add_argument("--version", action=_ShowVersion,
                        help="show version information and exit")

    modes = parser.add_argument_group("MODE")
    for short, long, subject, who in _SUBJECT_FLAGS:
        modes.add_argument(short, long, dest="modes", action=_AppendModeSpec,
                           const=subject.value, metavar="LETTERS",
                           help=f"permission letters for {who}")

    parser.add_argument("files", nargs="*", metavar="FILE")
    parser.set_defaults(modes=None)
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    """Run crtfile on *argv* (defaults to ``sys.argv[1:]``), returning the exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    try:
        if not argv:
            raise UsageError("missing operand (try '--help')")
        args = parser.parse_intermixed_args(argv)

        # stderr only until the config says where the log file is
        configure()
        settings = cfg.load_settings()
        configure(settings.log_file, debug=settings.debug, reconfigure=True)

        if not args.files:
            raise UsageError("missing operand")
        mask = resolve_specs(args.modes or [])
    except _EarlyExit as exc:
        return exc.status
    except CrtfileError as exc:
        emit_error(exc.report())
        return 1

    mode = CreateMode.TRUNCATE_EXISTING if args.truncate else CreateMode.CREATE_EXCLUSIVE
    absolute = args.absolute or settings.absolute
    logger.debug(
        "%s %d file(s) with %s%s",
        mode.name.lower(), len(args.files), format_mask(mask),
        " (umask ignored)" if absolute else "",
    )
    result = materialize(
        args.files,
        mode,
        mask,
        verbose=args.verbose or settings.verbose,
        absolute=absolute,
    )
    if not result.ok:
        logger.debug("%d of %d file(s) failed", len(result.failed), len(result.outcomes))
    return result.exit_status


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
