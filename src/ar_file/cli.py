"""
Command-line utility that lists the member headers of an AR archive, one per line.
"""

import sys

from argparse import ArgumentParser
from typing import List, Optional

from atmfjstc.lib.cli_utils.console import console
from atmfjstc.lib.cli_utils.errors import pretty_unhandled
from atmfjstc.lib.os_forensics.posix import posix_permissions_num_to_string

from . import ArFile, ArHeader, ArFormatError


def format_ar_header(header: ArHeader) -> str:
    permissions = header.posix_permissions
    mode_text = posix_permissions_num_to_string(permissions) if permissions is not None else repr(header.mode)
    mtime_text = header.mtime_iso or str(header.mtime)

    parts = [
        f"{header.name}",
        f"size={header.size}",
        f"mtime={mtime_text}",
        f"uid={header.owner_uid}",
        f"gid={header.group_gid}",
        f"mode={mode_text}",
    ]

    if header.data_offset is not None:
        parts.append(f"data_offset={header.data_offset}")
    if header.has_extended_name:
        parts.append(f"data_start={header.data_start}")

    return '  '.join(parts)


def _build_arg_parser() -> ArgumentParser:
    parser = ArgumentParser(description="List the member headers of an AR archive")
    parser.add_argument('archive', help="path to the archive")
    parser.add_argument(
        '--in-memory', action='store_true', help="load the whole archive in memory instead of streaming it"
    )
    parser.add_argument('-v', '--verbose', action='store_true', help="show progress and a summary")

    return parser


@pretty_unhandled()
def main(argv: Optional[List[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    if args.verbose:
        console.print_progress(f"Reading {args.archive}...")

    with ArFile(args.archive, in_memory=args.in_memory) as ar_file:
        count = 0

        try:
            for header in ar_file:
                console.print_info(format_ar_header(header))
                count += 1
        except ArFormatError as e:
            console.print_error(f"{args.archive}: {e}")
            return 1

    if args.verbose:
        console.print_success(f"{count} member(s)")

    return 0


if __name__ == '__main__':
    sys.exit(main())
