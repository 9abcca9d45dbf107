#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Generate compile_commands.json and link_commands.json from MSBuild tool events.

This script replays the command line events of an MSBuild build (CL, Link and
Lib tasks) and writes a compilation database with one entry per compiled
source file plus a link database with one entry per link or archive step.

Requirements:
    - Python 3.8+
    - colorama, packaging

Usage:
    msbuildCompileDatabase.py <events.jsonl | -> [--output-dir DIR] [--jobs N] [--summary]

Event format (JSON Lines or a JSON array):
    {"taskName": "CL", "commandLineText": "cl.exe /c main.cpp", "projectFilePath": "C:\\\\src\\\\app.vcxproj"}

Exit Codes:
    0: Success
    1: Invalid arguments or events file
    2: Output could not be written
    130: Interrupted
"""

import os
import sys
import signal
import logging
import argparse
from typing import Any, List, Optional, Tuple

from compdb import __version__
from compdb.color_utils import Colors, format_count, print_error, print_success, print_warning
from compdb.constants import (
    COMPILE_COMMANDS_JSON,
    DEFAULT_JOBS,
    EXIT_INVALID_ARGS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    LINK_COMMANDS_JSON,
    ArgumentError,
    CompileDatabaseError,
)
from compdb.database import DatabaseSnapshot
from compdb.events import CompileDatabaseLogger, EventStatistics, read_events_file
from compdb.export_utils import write_compile_database
from compdb.package_verification import require_package

logger = logging.getLogger(__name__)

__all__ = ["EXIT_SUCCESS", "main", "build_database"]


def signal_handler(signum: int, frame: Any) -> None:
    """Handle interrupt signals gracefully."""
    print_warning("\nInterrupted by user. Exiting...", prefix=False)
    sys.exit(EXIT_KEYBOARD_INTERRUPT)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate compile_commands.json and link_commands.json from MSBuild tool events.",
        epilog=f"Version {__version__}\n\nExamples:\n"
        f"  %(prog)s build_events.jsonl\n"
        f"  %(prog)s build_events.jsonl --output-dir out --jobs 8 --summary\n"
        f"  type events.jsonl | %(prog)s -\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("events", metavar="EVENTS", help="Events file (JSON Lines or JSON array), '-' for stdin")
    parser.add_argument("--output-dir", "-o", default=".", metavar="DIR", help="Directory receiving the database files (default: .)")
    parser.add_argument("--compile-output", default=COMPILE_COMMANDS_JSON, metavar="NAME", help=f"Compile database file name (default: {COMPILE_COMMANDS_JSON})")
    parser.add_argument("--link-output", default=LINK_COMMANDS_JSON, metavar="NAME", help=f"Link database file name (default: {LINK_COMMANDS_JSON})")
    parser.add_argument("--jobs", "-j", type=int, default=DEFAULT_JOBS, help=f"Worker threads replaying events (default: {DEFAULT_JOBS})")
    parser.add_argument("--summary", action="store_true", help="Print a summary of the generated databases")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def build_database(events_path: str, jobs: int = DEFAULT_JOBS) -> Tuple[DatabaseSnapshot, EventStatistics]:
    """Replay the events of one build and return the finished database.

    Raises:
        ArgumentError: If jobs is smaller than 1
        EventFormatError: If the events file cannot be read
    """
    if jobs < 1:
        raise ArgumentError(f"--jobs must be at least 1, got {jobs}")

    events = read_events_file(events_path)
    logger.debug("Read %d events from %s", len(events), events_path)

    db_logger = CompileDatabaseLogger()
    statistics = db_logger.process_events(events, jobs=jobs)
    return db_logger.shutdown(), statistics


def print_summary(snapshot: DatabaseSnapshot, statistics: EventStatistics, compile_path: str, link_path: str) -> None:
    print(f"\n{Colors.BRIGHT}{Colors.CYAN}=== Compilation Database Summary ==={Colors.RESET}")
    print(format_count("Events", statistics.total_events, Colors.WHITE))
    print(format_count("Compile invocations", statistics.compile_invocations, Colors.GREEN))
    print(format_count("Link invocations", statistics.link_invocations, Colors.GREEN))
    print(format_count("Ignored events", statistics.ignored_events, Colors.DIM))
    malformed_color = Colors.RED if statistics.malformed_events else Colors.WHITE
    print(format_count("Malformed events", statistics.malformed_events, malformed_color))
    print(format_count("Compile records", len(snapshot.compile_records), Colors.MAGENTA))
    print(format_count("Link records", len(snapshot.link_records), Colors.MAGENTA))
    print(f"\n  {Colors.DIM}{compile_path}{Colors.RESET}")
    print(f"  {Colors.DIM}{link_path}{Colors.RESET}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the script.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_arguments(argv)

    if args.no_color or not sys.stdout.isatty():
        Colors.disable()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    require_package("colorama", "colored output")
    require_package("packaging", "dependency checks")

    if args.events != "-" and not os.path.isfile(args.events):
        print_error(f"Events file not found: {args.events}")
        return EXIT_INVALID_ARGS

    try:
        snapshot, statistics = build_database(args.events, args.jobs)
        compile_path, link_path = write_compile_database(snapshot, args.output_dir, args.compile_output, args.link_output)
    except CompileDatabaseError as e:
        print_error(str(e))
        return e.exit_code

    if statistics.malformed_events:
        print_warning(f"Skipped {statistics.malformed_events} malformed invocation(s), see log output")

    if args.summary:
        try:
            print_summary(snapshot, statistics, compile_path, link_path)
        except BrokenPipeError:
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, sys.stdout.fileno())
            return EXIT_SUCCESS
    else:
        print_success(f"Wrote {len(snapshot.compile_records)} compile and {len(snapshot.link_records)} link records to {args.output_dir}")

    return EXIT_SUCCESS


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print_warning("Interrupted.", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except CompileDatabaseError as e:
        print_error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(EXIT_RUNTIME_ERROR)
