"""
The ``zip-scan`` command: a thin caller that loads an archive into memory, walks its local file headers and prints
them.

Commands:

- ``zip-scan list FILE``: lists the entries (use ``-`` to read the archive from stdin)
- ``zip-scan version``: prints the program version
"""

import sys
import logging
import traceback

from argparse import ArgumentParser, Namespace
from functools import wraps
from pathlib import Path
from textwrap import indent
from typing import Optional, Sequence, List, Callable

from colorama import just_fix_windows_console

from atmfjstc.lib.zip_scan import __version__
from atmfjstc.lib.zip_scan.console import console
from atmfjstc.lib.zip_scan.errors import ZipScanError
from atmfjstc.lib.zip_scan.local_file_header import LocalFileHeader
from atmfjstc.lib.zip_scan.options import ScanOptions
from atmfjstc.lib.zip_scan.walker import LocalFileWalker


PROGRAM_NAME = 'zip-scan'

EXIT_OK = 0
EXIT_FAILURE = 1

CONTENT_HEAD_BYTES = 16


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Runs the program with the given arguments (``sys.argv[1:]`` if None) and returns the exit code.

    Archive errors are reported as short messages. Usage errors cause argparse to exit with code 2.
    """
    args = _build_argument_parser().parse_args(argv)

    init_console_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if getattr(args, 'no_color', False):
        console.disable_color()

    if args.command is None:
        console.print_error(f"No command given. Run '{PROGRAM_NAME} --help' for usage.")
        return EXIT_FAILURE

    try:
        return args.handler(args)
    except ZipScanError as e:
        console.print_error(short_format_error(e))

    return EXIT_FAILURE


def report_crashes(main_method: Callable[..., int]) -> Callable[..., int]:
    """
    Decorator for a main function that causes unexpected exceptions to be displayed in a pretty way (with a
    traceback, since they are assumed to be bugs) and converted to a failure exit code.
    """

    @wraps(main_method)
    def wrapper(*args, **kwargs) -> int:
        try:
            return main_method(*args, **kwargs)
        except SystemExit:
            raise
        except KeyboardInterrupt:
            console.print_warning("Stopped by user")
            return EXIT_FAILURE
        except Exception as e:
            console.print_error(''.join(traceback.format_exception_only(e.__class__, e)).rstrip())
            console.print_error("Traceback:", minor=True)
            console.print_error(
                indent(''.join(traceback.format_list(traceback.extract_tb(e.__traceback__))).rstrip(), '  '),
                minor=True
            )
            return EXIT_FAILURE

    return wrapper


def main_entry_point():
    just_fix_windows_console()
    sys.exit(report_crashes(main)())


def init_console_logging(level: int = logging.WARNING):
    """
    Initializes logging for use in the console: each message gets a timestamp and its level name. Logging goes to
    stderr, so it does not mix with the listing.
    """
    logging.basicConfig(
        level=level,
        style='{',
        format='[{asctime}] {levelname}: {message}',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def short_format_error(error: BaseException) -> str:
    """
    Formats an error as its message, followed by the messages of its causes (indented), without any traceback.
    """
    lines = [str(error) or error.__class__.__name__]

    cause = error.__cause__
    while cause is not None:
        lines.append(indent(str(cause) or cause.__class__.__name__, '  '))
        cause = cause.__cause__

    return '\n'.join(lines)


def _build_argument_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog=PROGRAM_NAME,
        description="Lists the entries of a ZIP archive by walking its local file headers",
    )
    parser.add_argument('-v', '--verbose', action='store_true', help="verbose output (debug logging)")
    parser.set_defaults(command=None)

    subparsers = parser.add_subparsers(title='commands')

    list_parser = subparsers.add_parser('list', help="list the entries of an archive")
    list_parser.add_argument('file', help="the archive to read, or '-' for stdin")
    list_parser.add_argument(
        '--strict-compression', action='store_true',
        help="fail on compression methods other than store/deflate instead of reading them as stored data"
    )
    list_parser.add_argument('--verify', action='store_true', help="check the size and CRC-32 of every entry")
    list_parser.add_argument('--max-entries', type=_non_negative_int, default=None, metavar='N')
    list_parser.add_argument('--max-content-size', type=_non_negative_int, default=None, metavar='BYTES')
    list_parser.add_argument('--show-content', action='store_true', help="also print the content of each entry")
    list_parser.add_argument('--no-color', action='store_true', help="do not use colors")
    list_parser.set_defaults(command='list', handler=_run_list)

    version_parser = subparsers.add_parser('version', help=f"print the version number of {PROGRAM_NAME}")
    version_parser.set_defaults(command='version', handler=_run_version)

    return parser


def _non_negative_int(raw_value: str) -> int:
    value = int(raw_value)
    if value < 0:
        raise ValueError(f"must be non-negative: {raw_value}")

    return value


def _run_version(args: Namespace) -> int:
    console.print_info(f"{PROGRAM_NAME} v{__version__}")
    return EXIT_OK


def _run_list(args: Namespace) -> int:
    try:
        data = _load_archive(args.file)
    except OSError as e:
        console.print_error(f"Could not read '{args.file}': {e.strerror or e}")
        return EXIT_FAILURE

    options = ScanOptions(
        strict_compression=args.strict_compression,
        verify_integrity=args.verify,
        max_entries=args.max_entries,
        max_content_size=args.max_content_size,
    )

    walker = LocalFileWalker(data, options, source_name=args.file)

    for header in walker:
        for line in _describe_entry(header, args.show_content):
            console.print_info(line)

        if header.raw_compression_method != header.compression_method:
            console.print_warning(
                f"Entry '{_printable_name(header)}' uses unsupported compression method "
                f"{header.raw_compression_method}; its data was read as stored"
            )

    console.print_success(f"{walker.entries_read} entries, {walker.trailing_size} trailing bytes")

    return EXIT_OK


def _load_archive(file: str) -> bytes:
    if file == '-':
        return sys.stdin.buffer.read()

    return Path(file).read_bytes()


def _describe_entry(header: LocalFileHeader, show_content: bool) -> List[str]:
    lines = [
        f"{header.last_modified.strftime('%Y-%m-%d %H:%M:%S')}  {header.compression_method.name.lower():<7}  "
        f"{header.compressed_size:>10}  {header.uncompressed_size:>10}  {_printable_name(header)}"
    ]

    if show_content:
        lines.append(f"  head: {header.content[:CONTENT_HEAD_BYTES].hex(' ')}")
        lines.append(indent(header.content.decode('utf-8', errors='replace'), '  | ', lambda _: True))

    return lines


def _printable_name(header: LocalFileHeader) -> str:
    return header.raw_file_name.decode('utf-8', errors='replace')
