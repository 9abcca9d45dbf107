#!/usr/bin/env python3
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
"""Pytest configuration and shared fixtures for compdb tests.

Fixture Scopes:
- function: Default, recreated for each test
- module: Shared across tests in one file, use for immutable data
"""

import sys
import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

PROJECT_FILE = "C:\\src\\app\\app.vcxproj"
PROJECT_DIR = "C:\\src\\app"


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="compdb_test_")
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def sample_events() -> List[Dict[str, Any]]:
    """Events of a small build: two compiles, one librarian step, one link and unrelated tasks.

    Scope: function
    Use for: Event handling and end-to-end tests
    """
    return [
        {"taskName": "Message", "commandLineText": "", "projectFilePath": PROJECT_FILE},
        {
            "taskName": "CL",
            "commandLineText": '"C:\\VC\\bin\\cl.exe" /c /I"inc dir" /DNDEBUG /Zi main.cpp util.cpp',
            "projectFilePath": PROJECT_FILE,
        },
        {
            "taskName": "CL",
            "commandLineText": "C:\\VC\\bin\\cl.exe /c /Tc legacy.inc /Fodebug\\legacy.obj",
            "projectFilePath": PROJECT_FILE,
        },
        {"taskName": "Lib", "commandLineText": "C:\\VC\\bin\\lib.exe /OUT:util.lib util.obj", "projectFilePath": PROJECT_FILE},
        {
            "taskName": "Link",
            "commandLineText": "C:\\VC\\bin\\link.exe /OUT:app.exe main.obj legacy.obj util.lib kernel32.lib",
            "projectFilePath": PROJECT_FILE,
        },
        {"taskName": "CL", "commandLineText": "cl /c broken.cpp", "projectFilePath": PROJECT_FILE},
        {"taskName": "Copy", "commandLineText": "xcopy.exe a b", "projectFilePath": PROJECT_FILE},
    ]


@pytest.fixture
def events_file(temp_dir: str, sample_events: List[Dict[str, Any]]) -> str:
    """Write sample_events as a JSON Lines file.

    Scope: function
    Dependencies: temp_dir, sample_events
    """
    path = Path(temp_dir) / "events.jsonl"
    path.write_text("\n".join(json.dumps(event) for event in sample_events) + "\n", encoding="utf-8")
    return str(path)
