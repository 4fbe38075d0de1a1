from __future__ import annotations

import contextlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic_core import to_jsonable_python

from .paths import ensure_dir


@dataclass(frozen=True)
class JsonOptions:
    # Reading
    allow_comments: bool = True
    allow_trailing_commas: bool = True

    # Writing
    indent: str = "\t"
    newline: str = "\n"
    ensure_ascii: bool = False


DEFAULT_JSON_OPTIONS = JsonOptions()


def strip_comments(text: str) -> str:
    """
    Drop `//` line comments and `/* */` block comments outside string literals.

    Each comment is replaced by a single space (line comments keep their newline)
    so neighbouring tokens stay separated.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue
        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            end = text.find("\n", i + 2)
            if end == -1:
                break
            out.append(" ")
            i = end
            continue
        if ch == "/" and i + 1 < n and text[i + 1] == "*":
            end = text.find("*/", i + 2)
            if end == -1:
                raise json.JSONDecodeError("Unterminated comment", text, i)
            out.append(" ")
            i = end + 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede `}` or `]` (ignoring whitespace)."""
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def loads(text: str, options: JsonOptions = DEFAULT_JSON_OPTIONS) -> Any:
    """
    Parse JSON text, tolerating comments and trailing commas when enabled.

    Raises `json.JSONDecodeError` (a `ValueError`) on malformed input.
    """
    if options.allow_comments:
        text = strip_comments(text)
    if options.allow_trailing_commas:
        text = strip_trailing_commas(text)
    return json.loads(text)


def dumps(value: Any, options: JsonOptions = DEFAULT_JSON_OPTIONS) -> str:
    """
    Serialize `value` as pretty JSON followed by a newline.

    Values json can't encode natively (pydantic models, dataclasses, datetimes, ...)
    go through `pydantic_core.to_jsonable_python`. NaN and infinities are rejected.
    """
    text = json.dumps(
        value,
        indent=options.indent,
        ensure_ascii=options.ensure_ascii,
        allow_nan=False,
        default=to_jsonable_python,
    )
    text += "\n"
    if options.newline != "\n":
        text = text.replace("\n", options.newline)
    return text


def read_text(path: Path) -> str | None:
    """
    Read a UTF-8 text file, dropping a leading byte-order mark.

    Returns None for missing files. Other `OSError`s and undecodable bytes
    (`UnicodeDecodeError`) propagate so callers can decide how to treat them.
    """
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        return None


def atomic_write_text(path: Path, text: str) -> None:
    """
    Atomically write text to disk by writing to a temp file then replacing.

    Newlines are written exactly as given. On failure the temp file is removed
    and the `OSError` propagates.
    """
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise
