# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Pytest configuration and shared fixtures."""

import os
import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from shandy_sqlfmt.variables import SubstitutionContext

# Stand-in for sqlfmt: answers --version, formats stdin when the last
# argument is "-", otherwise rewrites the given files and directories.
FAKE_SQLFMT = """
import json
import os
import sys


def fmt(text):
    if "syntax error" in text:
        sys.stderr.write("Error: could not parse line 1\\n")
        sys.exit(2)
    tokens = text.split()
    if not tokens:
        return ""
    return tokens[0] + "".join("\\n    " + t for t in tokens[1:]) + "\\n"


args = sys.argv[1:]
log = os.environ.get("FAKE_SQLFMT_LOG")
if log and args != ["--version"]:
    with open(log, "a") as f:
        f.write(json.dumps({"argv": args, "cwd": os.getcwd()}) + "\\n")

if args == ["--version"]:
    print("sqlfmt, version 0.0.0")
    sys.exit(int(os.environ.get("FAKE_SQLFMT_VERSION_EXIT", "0")))

if args and args[-1] == "-":
    if os.environ.get("FAKE_SQLFMT_WARN"):
        sys.stderr.write("warning: line too long\\n")
    sys.stdout.write(fmt(sys.stdin.read()))
    sys.exit(0)

targets = [a for a in args if not a.startswith("-")]
for target in targets:
    paths = []
    if os.path.isdir(target):
        for root, _, files in os.walk(target):
            paths.extend(os.path.join(root, n) for n in files if n.endswith(".sql"))
    else:
        paths.append(target)
    for path in paths:
        with open(path) as f:
            text = f.read()
        with open(path, "w") as f:
            f.write(fmt(text))
print(f"{len(targets)} target(s) formatted")
"""


@pytest.fixture
def make_executable(tmp_path) -> Callable[..., Path]:
    """Factory for executable Python scripts behind a /bin/sh wrapper."""

    def _make(name: str, body: str, directory: Path = None) -> Path:
        directory = directory or tmp_path / "bin"
        directory.mkdir(parents=True, exist_ok=True)
        script = directory / f"_{name}_impl.py"
        script.write_text(textwrap.dedent(body))
        exe = directory / name
        exe.write_text(f"#!/bin/sh\nexec '{sys.executable}' '{script}' \"$@\"\n")
        exe.chmod(0o755)
        return exe

    return _make


@pytest.fixture
def make_sqlfmt(make_executable) -> Callable[..., Path]:
    """Factory for fake sqlfmt executables in a given directory."""

    def _make(directory: Path = None) -> Path:
        return make_executable("sqlfmt", FAKE_SQLFMT, directory)

    return _make


@pytest.fixture
def fake_sqlfmt(make_sqlfmt) -> Path:
    """A working fake sqlfmt executable."""
    return make_sqlfmt()


@pytest.fixture
def argv_log(tmp_path, monkeypatch) -> Path:
    """Record every fake sqlfmt invocation (argv and cwd) as JSON lines."""
    log = tmp_path / "argv.jsonl"
    monkeypatch.setenv("FAKE_SQLFMT_LOG", str(log))
    return log


@pytest.fixture
def context(tmp_path) -> SubstitutionContext:
    """Deterministic substitution context."""
    return SubstitutionContext(
        environment={"HOME": "/home/tester", "PATH": os.environ.get("PATH", "")},
        cwd=str(tmp_path),
    )
