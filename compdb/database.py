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
"""Thread-safe accumulation of compile and link records.

Build events may arrive from several build nodes at once. CompileDatabase
serializes the append step only; all records of one invocation are appended
under a single lock acquisition so they stay contiguous.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

__all__ = ["CompileRecord", "LinkRecord", "DatabaseSnapshot", "CompileDatabase"]


@dataclass(frozen=True)
class CompileRecord:
    """One compiled source file.

    Attributes:
        command: Canonical compile command
        directory: Directory of the project that compiled the file
        file: Source file as named on the command line
    """

    command: str
    directory: str
    file: str

    def to_dict(self) -> Dict[str, Any]:
        return {"command": self.command, "file": self.file, "directory": self.directory}


@dataclass(frozen=True)
class LinkRecord:
    """One link or archive step.

    Attributes:
        command: Canonical link command
        directory: Directory of the project that ran the linker
        files: Object, library and DLL inputs in command line order
    """

    command: str
    directory: str
    files: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"directory": self.directory, "command": self.command, "files": list(self.files)}


@dataclass(frozen=True)
class DatabaseSnapshot:
    """Records of a database in insertion order."""

    compile_records: Tuple[CompileRecord, ...]
    link_records: Tuple[LinkRecord, ...]


class CompileDatabase:
    """Append-only collection of compile and link records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._compile_records: List[CompileRecord] = []
        self._link_records: List[LinkRecord] = []

    def add_compile(self, command: str, directory: str, files: Iterable[str]) -> int:
        """Append one CompileRecord per file, in file order.

        Args:
            command: Canonical compile command shared by all records
            directory: Project directory
            files: Source files of the invocation

        Returns:
            Number of records appended

        Raises:
            ValueError: If a file name is empty
        """
        records = [CompileRecord(command, directory, name) for name in files]
        if any(not record.file for record in records):
            raise ValueError("Compile records require a non-empty file name")

        with self._lock:
            self._compile_records.extend(records)
        return len(records)

    def add_link(self, command: str, directory: str, files: Iterable[str]) -> LinkRecord:
        """Append exactly one LinkRecord, even when files is empty."""
        record = LinkRecord(command, directory, tuple(files))
        with self._lock:
            self._link_records.append(record)
        return record

    def snapshot(self) -> DatabaseSnapshot:
        """Return both record sequences in insertion order."""
        with self._lock:
            return DatabaseSnapshot(tuple(self._compile_records), tuple(self._link_records))

    @property
    def compile_records(self) -> Tuple[CompileRecord, ...]:
        return self.snapshot().compile_records

    @property
    def link_records(self) -> Tuple[LinkRecord, ...]:
        return self.snapshot().link_records

    def __len__(self) -> int:
        with self._lock:
            return len(self._compile_records) + len(self._link_records)
