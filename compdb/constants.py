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
"""Shared constants for the MSBuild compilation database tools.

This module provides centralized constants used across the compdb modules
to ensure consistency and make it easy to adjust option tables and defaults.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Output Files
# =============================================================================

COMPILE_COMMANDS_JSON = "compile_commands.json"  # Standard compilation database filename
LINK_COMMANDS_JSON = "link_commands.json"  # Link/archive steps, one entry per invocation
JSON_INDENT = 2

# =============================================================================
# Build Task Names
# =============================================================================

# MSBuild task names (lowercase) that carry a compiler or linker command line
COMPILE_TASK_NAMES = ("cl",)
LINK_TASK_NAMES = ("link", "lib")

# =============================================================================
# Command Line Grammar
# =============================================================================

OPTION_PREFIXES = ("/", "-")
RESPONSE_FILE_PREFIX = "@"
EXECUTABLE_SUFFIX = ".exe"
QUOTE_CHAR = '"'
ESCAPE_CHAR = "\\"

# Options that consume the following argument (case-sensitive, without prefix)
OPTIONS_WITH_PARAM = (
    "D",
    "I",
    "F",
    "U",
    "FI",
    "FU",
    "analyze:log",
    "analyze:stacksize",
    "analyze:max_paths",
    "analyze:ruleset",
    "analyze:plugin",
)

# Source designation options
SOURCE_FILE_OPTIONS = ("Tc", "Tp")  # /Tc file.c, /Tcfile.c
ALL_SOURCES_OPTIONS = ("TC", "TP")  # every plain argument is a source
LINK_SWITCH_OPTION = "link"  # remaining arguments belong to the linker

# =============================================================================
# File Roles
# =============================================================================

SOURCE_EXTENSIONS = ("c", "cxx", "cpp")
LINK_INPUT_EXTENSIONS = ("obj", "lib", "dll")

# =============================================================================
# Processing
# =============================================================================

DEFAULT_JOBS = 1  # Worker threads used to replay build events

# =============================================================================
# Exception Classes
# =============================================================================


class CompileDatabaseError(Exception):
    """Base exception for all compdb errors.

    All compdb exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(CompileDatabaseError):
    """Raised when input validation fails (arguments, event files, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


class EventFormatError(ValidationError):
    """Raised when a build event record cannot be read."""

    def __init__(self, message: str, line_number: int = 0):
        if line_number:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


# Invocation errors (EXIT_RUNTIME_ERROR), handled per event and never fatal to a build
class InvocationError(CompileDatabaseError):
    """Raised when a single tool invocation cannot be processed."""


class MalformedInvocationError(InvocationError):
    """Raised when the executable path or its terminator is missing from a command line."""

    def __init__(self, message: str, command_line: str = ""):
        super().__init__(message)
        self.command_line = command_line


class UnsupportedTaskNameError(InvocationError):
    """Raised when a build task is not a compiler, linker or librarian task."""

    def __init__(self, task_name: str):  # pylint: disable=useless-parent-delegation
        super().__init__(f"Unsupported task name: {task_name!r}")
        self.task_name = task_name


class OutputFileError(CompileDatabaseError):
    """Raised when a database file cannot be written."""
