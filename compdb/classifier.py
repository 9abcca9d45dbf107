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
"""Argument classification and file role resolution for MSVC tool invocations.

Classification walks the token list of one invocation left to right and
separates option tokens (and their parameters) from plain arguments. Plain
arguments become file candidates; the file role resolver then decides which
candidates are source files (compile) or object/library inputs (link).

Option semantics are looked up in a per-invocation-kind OptionTable, so a
dedicated linker table can replace the shared one without touching the
classification algorithm.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence

from compdb.command_line import unquote_argument
from compdb.constants import (
    ALL_SOURCES_OPTIONS,
    LINK_INPUT_EXTENSIONS,
    LINK_SWITCH_OPTION,
    OPTION_PREFIXES,
    OPTIONS_WITH_PARAM,
    RESPONSE_FILE_PREFIX,
    SOURCE_EXTENSIONS,
    SOURCE_FILE_OPTIONS,
)

logger = logging.getLogger(__name__)

__all__ = [
    "InvocationKind",
    "OptionTable",
    "ClassifiedArguments",
    "OPTION_TABLES",
    "option_name",
    "classify_arguments",
    "file_extension",
    "resolve_files",
    "is_link_invocation",
    "effective_kind",
]


class InvocationKind(enum.Enum):
    """Kind of tool invocation a build event carries."""

    COMPILE = "compile"
    LINK = "link"


@dataclass(frozen=True)
class OptionTable:
    """Static option semantics for one invocation kind.

    Attributes:
        options_with_param: Option names (without prefix, case-sensitive) whose
            parameter is passed as the following token
    """

    options_with_param: FrozenSet[str]

    def consumes_next_token(self, name: str) -> bool:
        return name in self.options_with_param


CL_OPTION_TABLE = OptionTable(frozenset(OPTIONS_WITH_PARAM))

# link.exe and lib.exe do not know /D or /I; the compiler table is reused as
# observed in MSBuild logs until a dedicated linker table is defined.
OPTION_TABLES: Dict[InvocationKind, OptionTable] = {
    InvocationKind.COMPILE: CL_OPTION_TABLE,
    InvocationKind.LINK: CL_OPTION_TABLE,
}


@dataclass
class ClassifiedArguments:
    """Result of classifying the tokens of one invocation.

    Attributes:
        candidate_files: Plain tokens (verbatim) that may name files
        source_files: Files designated as sources by /Tc or /Tp (unquoted)
        all_sources: True if /TC or /TP marks every candidate as a source
    """

    candidate_files: List[str] = field(default_factory=list)
    source_files: List[str] = field(default_factory=list)
    all_sources: bool = False


def option_name(token: str) -> Optional[str]:
    """Return the option name of an option-like token, or None for plain tokens.

    Examples:
        >>> option_name("/Fo:out.obj")
        'Fo:out.obj'
        >>> option_name("main.cpp") is None
        True
    """
    if token.startswith(OPTION_PREFIXES):
        return token[1:]
    return None


def classify_arguments(tokens: Sequence[str], kind: InvocationKind, option_table: Optional[OptionTable] = None) -> ClassifiedArguments:
    """Classify the tokens of one invocation.

    Rules, first match wins per token:
    1. An option listed in the option table consumes the next token.
    2. (compile) /Tc or /Tp: the next token is a source file.
    3. (compile) /Tc<file> or /Tp<file>: the rest of the token is a source file.
    4. (compile) /TC or /TP: every candidate is a source file.
    5. (compile) /link: the remaining tokens belong to the linker, stop.
    6. Other options and @response files are ignored.
    7. Plain tokens are file candidates.

    Args:
        tokens: Tokens from tokenize_command_line()
        kind: Invocation kind deciding which rules apply
        option_table: Option semantics (default: OPTION_TABLES[kind])

    Returns:
        ClassifiedArguments with candidates and mode flags
    """
    if option_table is None:
        option_table = OPTION_TABLES[kind]
    is_compile = kind is InvocationKind.COMPILE

    result = ClassifiedArguments()
    index = 0
    count = len(tokens)
    while index < count:
        token = tokens[index]
        name = option_name(token)

        if name is not None and option_table.consumes_next_token(name):
            index += 2
            continue

        if is_compile and name is not None:
            if name in SOURCE_FILE_OPTIONS:
                if index + 1 < count:
                    result.source_files.append(unquote_argument(tokens[index + 1]))
                else:
                    logger.debug("Option /%s without a file at end of command line", name)
                index += 2
                continue
            if name.startswith(SOURCE_FILE_OPTIONS):
                result.source_files.append(unquote_argument(name[2:]))
                index += 1
                continue
            if name in ALL_SOURCES_OPTIONS:
                result.all_sources = True
                index += 1
                continue
            if name == LINK_SWITCH_OPTION:
                break

        if name is None and not token.startswith(RESPONSE_FILE_PREFIX):
            result.candidate_files.append(token)
        index += 1

    return result


def file_extension(filename: str) -> Optional[str]:
    """Return the lowercased text after the last '.', or None if there is no '.'."""
    dot = filename.rfind(".")
    if dot == -1:
        return None
    return filename[dot + 1 :].lower()


def resolve_files(classified: ClassifiedArguments, kind: InvocationKind) -> List[str]:
    """Decide which candidates are the files of an invocation.

    Compile invocations yield source files: the /Tc and /Tp files, then every
    candidate in /TC or /TP mode, or the candidates with a C or C++ source
    extension. Link invocations yield object, library and DLL files.

    Args:
        classified: Output of classify_arguments()
        kind: Invocation kind the arguments were classified for

    Returns:
        File names (unquoted) in command line order
    """
    if kind is InvocationKind.COMPILE:
        files = [name for name in classified.source_files if name]
        extensions = SOURCE_EXTENSIONS
        accept_all = classified.all_sources
    else:
        files = []
        extensions = LINK_INPUT_EXTENSIONS
        accept_all = False

    for candidate in classified.candidate_files:
        name = unquote_argument(candidate)
        if not name:
            continue
        if accept_all or file_extension(name) in extensions:
            files.append(name)

    return files


def is_link_invocation(tokens: Sequence[str]) -> bool:
    """Check whether a compiler invocation hands off to the linker.

    Any token whose text after the first character is "link" (any case)
    counts: /link, -LINK and @link all redirect the invocation.
    """
    return any(token[1:].lower() == LINK_SWITCH_OPTION for token in tokens if token)


def effective_kind(kind: InvocationKind, tokens: Sequence[str]) -> InvocationKind:
    """Return the kind an invocation is recorded as.

    A compiler invocation that contains a /link switch is recorded as a link
    invocation; link and lib invocations are always link invocations.
    """
    if kind is InvocationKind.COMPILE and is_link_invocation(tokens):
        return InvocationKind.LINK
    return kind
