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
"""Build event handling.

A build reports each tool run as an event carrying the task name, the command
line text and the project file. CompileDatabaseLogger turns events into
database records for the lifetime of one build:

    logger = CompileDatabaseLogger()      # build start
    logger.handle_event(event)            # once per event, from any thread
    snapshot = logger.shutdown()          # build end, hand off for serialization

Events are read from JSON Lines files or JSON arrays with the fields
taskName, commandLineText and projectFilePath.
"""

import sys
import json
import ntpath
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO

from compdb.classifier import InvocationKind
from compdb.constants import (
    COMPILE_TASK_NAMES,
    DEFAULT_JOBS,
    LINK_TASK_NAMES,
    CompileDatabaseError,
    EventFormatError,
    MalformedInvocationError,
    UnsupportedTaskNameError,
)
from compdb.database import CompileDatabase, DatabaseSnapshot
from compdb.invocation import Invocation, parse_invocation

logger = logging.getLogger(__name__)

__all__ = ["BuildEvent", "EventStatistics", "CompileDatabaseLogger", "task_kind", "load_events", "read_events_file"]

EVENT_FIELDS = ("taskName", "commandLineText", "projectFilePath")


@dataclass(frozen=True)
class BuildEvent:
    """Command line event of one build task.

    Attributes:
        task_name: MSBuild task name (CL, Link, Lib, ...)
        command_line: Command line text of the tool run
        project_file: Path of the project file that ran the task
    """

    task_name: str
    command_line: str
    project_file: str

    @property
    def directory(self) -> str:
        """Directory containing the project file (Windows or POSIX separators)."""
        return ntpath.dirname(self.project_file)

    @classmethod
    def from_dict(cls, data: Any, line_number: int = 0) -> "BuildEvent":
        """Create an event from its JSON object.

        Raises:
            EventFormatError: If data is not an object or a field is missing or not a string
        """
        if not isinstance(data, dict):
            raise EventFormatError(f"expected a JSON object, got {type(data).__name__}", line_number)
        for key in EVENT_FIELDS:
            if not isinstance(data.get(key), str):
                raise EventFormatError(f"missing or non-string field '{key}'", line_number)
        return cls(task_name=data["taskName"], command_line=data["commandLineText"], project_file=data["projectFilePath"])

    def to_dict(self) -> Dict[str, str]:
        return {"taskName": self.task_name, "commandLineText": self.command_line, "projectFilePath": self.project_file}


def task_kind(task_name: str) -> InvocationKind:
    """Map a task name to the invocation kind it produces.

    Args:
        task_name: MSBuild task name, matched case-insensitively

    Returns:
        InvocationKind.COMPILE for cl, InvocationKind.LINK for link and lib

    Raises:
        UnsupportedTaskNameError: For every other task
    """
    name = task_name.strip().lower()
    if name in COMPILE_TASK_NAMES:
        return InvocationKind.COMPILE
    if name in LINK_TASK_NAMES:
        return InvocationKind.LINK
    raise UnsupportedTaskNameError(task_name)


def load_events(stream: TextIO) -> Iterator[BuildEvent]:
    """Read build events from a JSON array or JSON Lines stream.

    Args:
        stream: Text stream positioned at the start of the events

    Yields:
        BuildEvent in file order

    Raises:
        EventFormatError: On invalid JSON or malformed event objects
    """
    text = stream.read()
    if text.lstrip().startswith("["):
        try:
            items = json.loads(text)
        except json.JSONDecodeError as e:
            raise EventFormatError(f"invalid JSON: {e.msg}", e.lineno) from e
        for item in items:
            yield BuildEvent.from_dict(item)
        return

    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            item = json.loads(line)
        except json.JSONDecodeError as e:
            raise EventFormatError(f"invalid JSON: {e.msg}", line_number) from e
        yield BuildEvent.from_dict(item, line_number)


def read_events_file(path: str) -> List[BuildEvent]:
    """Read all build events from a file, or from stdin when path is '-'.

    Raises:
        EventFormatError: If the file cannot be read or holds malformed events
    """
    if path == "-":
        return list(load_events(sys.stdin))
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return list(load_events(f))
    except OSError as e:
        raise EventFormatError(f"Cannot read events file '{path}': {e}") from e


@dataclass
class EventStatistics:
    """Counters of how build events were handled."""

    compile_invocations: int = 0
    link_invocations: int = 0
    ignored_events: int = 0
    malformed_events: int = 0

    @property
    def total_events(self) -> int:
        return self.compile_invocations + self.link_invocations + self.ignored_events + self.malformed_events


class CompileDatabaseLogger:
    """Turns build events into compile and link records for one build."""

    def __init__(self, database: Optional[CompileDatabase] = None, base_dir: Optional[str] = None) -> None:
        self._database: Optional[CompileDatabase] = database if database is not None else CompileDatabase()
        self._base_dir = base_dir
        self._stats_lock = threading.Lock()
        self.statistics = EventStatistics()

    @property
    def database(self) -> CompileDatabase:
        if self._database is None:
            raise CompileDatabaseError("Build already finished, the database was handed off")
        return self._database

    def handle_event(self, event: BuildEvent) -> Optional[InvocationKind]:
        """Record one build event.

        Events of other tasks are ignored. A malformed command line is
        reported and skipped; records of earlier events are unaffected.

        Returns:
            The kind the invocation was recorded as, or None if it was ignored or skipped
        """
        database = self.database
        try:
            kind = task_kind(event.task_name)
        except UnsupportedTaskNameError:
            logger.debug("Ignoring task %s", event.task_name)
            self._count("ignored_events")
            return None

        try:
            parsed = parse_invocation(Invocation(event.command_line, event.directory, kind), self._base_dir)
        except MalformedInvocationError as e:
            logger.warning("Skipping %s task of %s: %s", event.task_name, event.project_file, e)
            self._count("malformed_events")
            return None

        if parsed.kind is InvocationKind.COMPILE:
            if not parsed.files:
                logger.debug("No source files in compile invocation: %s", parsed.command)
            database.add_compile(parsed.command, parsed.directory, parsed.files)
            self._count("compile_invocations")
        else:
            database.add_link(parsed.command, parsed.directory, parsed.files)
            self._count("link_invocations")
        return parsed.kind

    def process_events(self, events: Iterable[BuildEvent], jobs: int = DEFAULT_JOBS) -> EventStatistics:
        """Handle a sequence of events, on a pool of worker threads when jobs > 1.

        With one job the database order equals the event order; with more jobs
        only the records of each single invocation are guaranteed contiguous.
        """
        if jobs <= 1:
            for event in events:
                self.handle_event(event)
        else:
            with ThreadPoolExecutor(max_workers=jobs) as executor:
                list(executor.map(self.handle_event, events))
        return self.statistics

    def shutdown(self) -> DatabaseSnapshot:
        """Finish the build and return the accumulated records.

        The database is discarded; later calls to handle_event() raise CompileDatabaseError.
        """
        snapshot = self.database.snapshot()
        self._database = None
        logger.debug("Build finished: %d compile records, %d link records", len(snapshot.compile_records), len(snapshot.link_records))
        return snapshot

    def _count(self, counter: str) -> None:
        with self._stats_lock:
            setattr(self.statistics, counter, getattr(self.statistics, counter) + 1)
