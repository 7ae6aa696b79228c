# File: layergen/utils.py
"""
layergen - Naming Helpers & Utilities
=====================================
Identifier derivation, checksum and timing helpers used throughout the
generation pipeline.

The three naming functions are the only place raw SQL identifiers are turned
into target-language names.  Every artifact for a table goes through them, so
entity, mapper, service and controller always agree on the spelling.

All naming functions are decorated with ``@lru_cache(maxsize=None)``: the same
handful of table and column names is derived once per artifact, six artifacts
per table.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

import yaml

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_WORD_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[_\s-]+")
_ROUTE_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[_\s]+")

# Java reserved words; a member named after one of these does not compile
JAVA_KEYWORDS: FrozenSet[str] = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch",
    "char", "class", "const", "continue", "default", "do", "double",
    "else", "enum", "extends", "final", "finally", "float", "for", "goto",
    "if", "implements", "import", "instanceof", "int", "interface", "long",
    "native", "new", "package", "private", "protected", "public", "return",
    "short", "static", "strictfp", "super", "switch", "synchronized",
    "this", "throw", "throws", "transient", "try", "void", "volatile",
    "while", "true", "false", "null", "var", "record", "yield",
})


# ---------------------------------------------------------------------------
# Cached identifier derivation
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _split_segments(identifier: str) -> Tuple[str, ...]:
    return tuple(s for s in _WORD_SEPARATOR_RE.split(identifier) if s)


def _pascal_segment(segment: str) -> str:
    return segment[:1].upper() + segment[1:].lower()


@functools.lru_cache(maxsize=None)
def derive_member_name(identifier: str) -> str:
    """
    Convert a raw SQL identifier into a camelCase member name.

    Examples:
        >>> derive_member_name("user_name")
        'userName'
        >>> derive_member_name("CREATED_AT")
        'createdAt'
        >>> derive_member_name("userName")
        'username'

    The last example shows the function is not idempotent across case
    conventions: without a separator there is only one segment.
    """
    if not identifier:
        return ""
    segments = _split_segments(identifier)
    if not segments:
        return identifier.lower()
    first, rest = segments[0], segments[1:]
    return first.lower() + "".join(_pascal_segment(s) for s in rest)


@functools.lru_cache(maxsize=None)
def derive_pascal_name(identifier: str) -> str:
    """
    Convert a raw SQL identifier into a PascalCase type name.

    Examples:
        >>> derive_pascal_name("user_info")
        'UserInfo'
        >>> derive_pascal_name("my-awesome project")
        'MyAwesomeProject'
    """
    if not identifier:
        return ""
    segments = _split_segments(identifier)
    if not segments:
        return identifier.lower()
    return "".join(_pascal_segment(s) for s in segments)


@functools.lru_cache(maxsize=None)
def derive_route_segment(identifier: str) -> str:
    """Lower-kebab-case URL segment, e.g. ``user_info`` -> ``user-info``."""
    return _ROUTE_SEPARATOR_RE.sub("-", identifier.lower())


def package_to_path(package_name: str) -> str:
    """``com.example.shop`` -> ``com/example/shop``."""
    return package_name.replace(".", "/")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def javadoc(text: str, indent_level: int = 0, size: int = 4) -> List[str]:
    """
    Build a Javadoc block for *text*.

    The comment text is inserted verbatim apart from neutralising ``*/``,
    which would otherwise terminate the block early.
    """
    prefix: str = " " * (indent_level * size)
    safe: str = text.replace("*/", "*&#47;")
    lines: List[str] = [f"{prefix}/**"]
    lines.extend(f"{prefix} * {line}".rstrip() for line in safe.split("\n"))
    lines.append(f"{prefix} */")
    return lines


def xml_escape(text: str) -> str:
    """Escape text for use inside an XML attribute or comment-free body."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_lines(lines: Sequence[str]) -> str:
    """Join generated lines into file content with a trailing newline."""
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Structured file loading (config files, schema snapshots)
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_structured_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON or YAML mapping, dispatching on the file extension.

    Unknown extensions are tried as JSON first, then YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("introspect") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "JAVA_KEYWORDS",
    "derive_member_name",
    "derive_pascal_name",
    "derive_route_segment",
    "package_to_path",
    "javadoc",
    "xml_escape",
    "join_lines",
    "load_structured_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("layergen.utils loaded — %d public symbols.", len(__all__))
