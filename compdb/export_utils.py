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
"""Export utilities for writing compile and link databases to JSON files."""

import os
import json
import logging
from typing import Iterable, Tuple

from compdb.constants import COMPILE_COMMANDS_JSON, JSON_INDENT, LINK_COMMANDS_JSON, OutputFileError
from compdb.database import CompileRecord, DatabaseSnapshot, LinkRecord

logger = logging.getLogger(__name__)


def compile_records_to_json(records: Iterable[CompileRecord]) -> str:
    """Format compile records as a compile_commands.json document.

    Each entry has the keys command, file and directory, in that order.
    """
    return json.dumps([record.to_dict() for record in records], indent=JSON_INDENT, ensure_ascii=False) + "\n"


def link_records_to_json(records: Iterable[LinkRecord]) -> str:
    """Format link records as a link_commands.json document.

    Each entry has the keys directory, command and files, in that order.
    """
    return json.dumps([record.to_dict() for record in records], indent=JSON_INDENT, ensure_ascii=False) + "\n"


def write_json_file(filename: str, content: str) -> None:
    """Write a JSON document as UTF-8 without BOM.

    Raises:
        OutputFileError: If the file cannot be written
    """
    try:
        with open(filename, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except OSError as e:
        logger.error("Failed to write %s: %s", filename, e)
        raise OutputFileError(f"Failed to create {filename}: {e}") from e
    logger.info("Wrote %s", filename)


def write_compile_database(
    snapshot: DatabaseSnapshot, output_dir: str = ".", compile_filename: str = COMPILE_COMMANDS_JSON, link_filename: str = LINK_COMMANDS_JSON
) -> Tuple[str, str]:
    """Write the compile and link databases of a finished build.

    Both files are always written; an empty sequence yields an empty JSON array.

    Args:
        snapshot: Records handed off by CompileDatabaseLogger.shutdown()
        output_dir: Directory receiving the files (created if missing)
        compile_filename: File name of the compile database
        link_filename: File name of the link database

    Returns:
        Tuple of (compile_path, link_path)

    Raises:
        OutputFileError: If the directory or a file cannot be written
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise OutputFileError(f"Cannot create output directory '{output_dir}': {e}") from e

    compile_path = os.path.join(output_dir, compile_filename)
    link_path = os.path.join(output_dir, link_filename)
    write_json_file(compile_path, compile_records_to_json(snapshot.compile_records))
    write_json_file(link_path, link_records_to_json(snapshot.link_records))
    return compile_path, link_path
