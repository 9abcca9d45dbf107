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
"""Command line text handling for MSVC style tool invocations.

MSBuild reports every tool invocation as one line of text: the executable path
(quoted or not) followed by the argument string. This module splits that text
into the executable path and its arguments, tokenizes the arguments and
rebuilds a canonical command string with an absolute executable path.

Tokens keep their original text verbatim, quote characters included, so that
the rebuilt command can be run again without re-quoting. Use
unquote_argument() to turn a token into the value the tool actually sees.
"""

import os
import re
import ntpath
import logging
from typing import List, Optional, Sequence, Tuple

from compdb.constants import EXECUTABLE_SUFFIX, ESCAPE_CHAR, QUOTE_CHAR, MalformedInvocationError

logger = logging.getLogger(__name__)

__all__ = ["split_executable_path", "tokenize_command_line", "unquote_argument", "resolve_executable_path", "canonicalize_command"]

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_WINDOWS_ABSOLUTE_RE = re.compile(r"^(?:[A-Za-z]:[\\/]|\\\\)")
_WHITESPACE = (" ", "\t")


def split_executable_path(command_line: str) -> Tuple[str, str]:
    """Split a raw command line into the executable path and the remaining argument text.

    A quoted executable path ends at the first unescaped closing quote; escaped
    quotes inside it are unescaped. An unquoted path ends right after the first
    case-insensitive occurrence of ".exe".

    Args:
        command_line: Raw command line as reported by the build

    Returns:
        Tuple of (executable_path, remaining_text) with leading whitespace
        removed from remaining_text

    Raises:
        MalformedInvocationError: If the closing quote or ".exe" cannot be found

    Examples:
        >>> split_executable_path('"C:\\\\VC\\\\cl.exe" /c main.cpp')
        ('C:\\\\VC\\\\cl.exe', '/c main.cpp')
        >>> split_executable_path('link.exe /OUT:app.exe a.obj')
        ('link.exe', '/OUT:app.exe a.obj')
    """
    text = command_line.lstrip()
    if not text:
        raise MalformedInvocationError("Empty command line", command_line)

    if text.startswith(QUOTE_CHAR):
        escaped = False
        for index in range(1, len(text)):
            char = text[index]
            if escaped:
                escaped = False
            elif char == ESCAPE_CHAR:
                escaped = True
            elif char == QUOTE_CHAR:
                path = text[1:index].replace(ESCAPE_CHAR + QUOTE_CHAR, QUOTE_CHAR)
                return path, text[index + 1 :].lstrip()
        raise MalformedInvocationError(f"Unterminated quoted executable path in: {command_line}", command_line)

    suffix_index = text.lower().find(EXECUTABLE_SUFFIX)
    if suffix_index == -1:
        raise MalformedInvocationError(f"Unexpected lack of executable in: {command_line}", command_line)

    end = suffix_index + len(EXECUTABLE_SUFFIX)
    return text[:end], text[end:].lstrip()


def tokenize_command_line(text: str) -> List[str]:
    """Split argument text into tokens.

    Whitespace separates tokens except inside double quoted runs. Backslashes
    are literal unless a run of them precedes a double quote: an odd run
    escapes the quote, an even run leaves it as a delimiter. Line breaks count
    as single spaces.

    Token text is returned verbatim: quotes and backslashes are preserved.

    Args:
        text: Argument text (command line without the executable path)

    Returns:
        List of tokens in command line order

    Examples:
        >>> tokenize_command_line('/I"inc dir" /Tc foo.c')
        ['/I"inc dir"', '/Tc', 'foo.c']
        >>> tokenize_command_line('/FoDebug\\\\ main.cpp')
        ['/FoDebug\\\\', 'main.cpp']
    """
    text = _LINE_BREAK_RE.sub(" ", text)

    tokens: List[str] = []
    current: List[str] = []
    in_token = False
    in_quotes = False

    index = 0
    length = len(text)
    while index < length:
        char = text[index]

        if char == ESCAPE_CHAR:
            run_end = index
            while run_end < length and text[run_end] == ESCAPE_CHAR:
                run_end += 1
            current.append(text[index:run_end])
            in_token = True
            if run_end < length and text[run_end] == QUOTE_CHAR and (run_end - index) % 2:
                current.append(QUOTE_CHAR)
                run_end += 1
            index = run_end
            continue

        if char == QUOTE_CHAR:
            current.append(char)
            in_token = True
            in_quotes = not in_quotes
        elif char in _WHITESPACE and not in_quotes:
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(char)
            in_token = True
        index += 1

    if in_token:
        if in_quotes:
            logger.debug("Unterminated quote in argument text, keeping trailing token: %s", "".join(current))
        tokens.append("".join(current))

    return tokens


def unquote_argument(token: str) -> str:
    """Return the value a tool receives for a verbatim token.

    Double quotes are removed. A run of backslashes in front of a quote is
    halved and, when the run has odd length, the quote is kept literally.
    Backslashes elsewhere are path separators and stay untouched.

    Args:
        token: Token text as produced by tokenize_command_line()

    Returns:
        Unquoted argument value
    """
    if QUOTE_CHAR not in token:
        return token

    result: List[str] = []
    index = 0
    length = len(token)
    while index < length:
        char = token[index]
        if char == ESCAPE_CHAR:
            run_end = index
            while run_end < length and token[run_end] == ESCAPE_CHAR:
                run_end += 1
            run_length = run_end - index
            if run_end < length and token[run_end] == QUOTE_CHAR:
                result.append(ESCAPE_CHAR * (run_length // 2))
                if run_length % 2:
                    result.append(QUOTE_CHAR)
                index = run_end + 1
            else:
                result.append(ESCAPE_CHAR * run_length)
                index = run_end
        elif char == QUOTE_CHAR:
            index += 1
        else:
            result.append(char)
            index += 1

    return "".join(result)


def _is_windows_absolute(path: str) -> bool:
    return bool(_WINDOWS_ABSOLUTE_RE.match(path))


def resolve_executable_path(path: str, base_dir: Optional[str] = None) -> str:
    """Resolve an executable path to a normalized absolute path.

    Windows absolute paths (drive letter or UNC) are normalized with Windows
    path rules on every platform. Relative paths are joined with base_dir, or
    the current working directory. The file is not required to exist.

    Resolving a path that is already absolute and normalized returns it unchanged.

    Args:
        path: Executable path as written in the command line
        base_dir: Directory relative paths are resolved against (default: os.getcwd())

    Returns:
        Absolute executable path
    """
    if _is_windows_absolute(path):
        return ntpath.normpath(path)
    if os.path.isabs(path):
        return os.path.normpath(path)

    if base_dir is None:
        base_dir = os.getcwd()
    if _is_windows_absolute(base_dir):
        return ntpath.normpath(ntpath.join(base_dir, path))
    return os.path.normpath(os.path.join(base_dir, path))


def canonicalize_command(executable_path: str, tokens: Sequence[str], base_dir: Optional[str] = None) -> str:
    """Build the reproducible command string for one invocation.

    The result is the absolute executable path, always in double quotes,
    followed by the original tokens joined with single spaces. Tokens are not
    re-quoted.

    Args:
        executable_path: Executable path from split_executable_path()
        tokens: Argument tokens from tokenize_command_line()
        base_dir: Directory relative executable paths are resolved against

    Returns:
        Canonical command string
    """
    resolved = f"{QUOTE_CHAR}{resolve_executable_path(executable_path, base_dir)}{QUOTE_CHAR}"

    if not tokens:
        return resolved
    return f"{resolved} {' '.join(tokens)}"
