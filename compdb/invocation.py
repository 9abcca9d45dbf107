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
"""Processing of one observed tool invocation.

An Invocation is the raw command line of one tool run plus the directory of
the project that ran it. parse_invocation() runs the whole pipeline on it:
executable path extraction, tokenization, classification, file role
resolution and command canonicalization. It touches no shared state.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from compdb.classifier import InvocationKind, classify_arguments, effective_kind, resolve_files
from compdb.command_line import canonicalize_command, split_executable_path, tokenize_command_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invocation:
    """Raw command line of one tool run.

    Attributes:
        command_line: Command line text as reported by the build
        directory: Directory of the project file that ran the tool
        kind: Invocation kind derived from the task name
    """

    command_line: str
    directory: str
    kind: InvocationKind


@dataclass(frozen=True)
class ParsedInvocation:
    """Classified invocation, ready to be added to the database.

    Attributes:
        kind: Kind the invocation is recorded as (a compile with /link becomes LINK)
        executable: Executable path as written in the command line
        tokens: Argument tokens, verbatim
        command: Canonical command string
        directory: Directory of the originating project
        files: Source files (compile) or object/library files (link)
    """

    kind: InvocationKind
    executable: str
    tokens: Tuple[str, ...]
    command: str
    directory: str
    files: Tuple[str, ...]


def parse_invocation(invocation: Invocation, base_dir: Optional[str] = None) -> ParsedInvocation:
    """Run the classification pipeline on one invocation.

    Args:
        invocation: Invocation to parse
        base_dir: Directory relative executable paths are resolved against

    Returns:
        ParsedInvocation

    Raises:
        MalformedInvocationError: If no executable path can be found
    """
    executable, arguments = split_executable_path(invocation.command_line)
    tokens: List[str] = tokenize_command_line(arguments)
    kind = effective_kind(invocation.kind, tokens)

    classified = classify_arguments(tokens, kind)
    files = resolve_files(classified, kind)
    command = canonicalize_command(executable, tokens, base_dir)

    logger.debug("%s invocation of %s: %d tokens, files=%s", kind.value, executable, len(tokens), files)
    return ParsedInvocation(
        kind=kind,
        executable=executable,
        tokens=tuple(tokens),
        command=command,
        directory=invocation.directory,
        files=tuple(files),
    )
