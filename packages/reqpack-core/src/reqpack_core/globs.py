"""Glob pattern matching against project-relative paths.

Patterns use shell-style syntax extended for path trees:

- ``**`` matches any number of path segments (``**/`` may match none)
- ``*`` matches any characters within one segment
- ``?`` matches a single character within one segment
- ``[abc]`` / ``[!abc]`` match one character from (or not from) a set
- ``{xml,json}`` matches any of the comma-separated alternatives
- ``\\`` escapes the next character

Paths are always matched in their forward-slash form so that the same
pattern selects the same files on every platform.

Example:
    >>> matcher = compile_patterns(["test_results/**/*.xml"])
    >>> matcher.matches("test_results/unit/TEST-foo.xml")
    True
    >>> matcher.matches("other/TEST-foo.xml")
    False
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePath
import re

from reqpack_core.errors import GlobPatternError

__all__ = ["GlobMatcher", "compile_patterns", "translate"]


def translate(pattern: str) -> str:
    """Translate a glob pattern into a regular expression.

    Args:
        pattern: Glob pattern using forward slashes.

    Returns:
        Regular expression source, to be used with ``re.fullmatch``.

    Raises:
        GlobPatternError: If the pattern is empty or malformed.
    """
    if not pattern:
        raise GlobPatternError(pattern, "pattern is empty")

    parts: list[str] = []
    in_group = False
    i = 0
    n = len(pattern)

    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if pattern.startswith("/", i):
                    parts.append("(?:.*/)?")
                    i += 1
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            i = _translate_class(pattern, i, parts)
            continue
        elif c == "{":
            if in_group:
                raise GlobPatternError(pattern, "nested '{' is not supported")
            in_group = True
            parts.append("(?:")
        elif c == "}" and in_group:
            in_group = False
            parts.append(")")
        elif c == "," and in_group:
            parts.append("|")
        elif c == "\\":
            if i + 1 >= n:
                raise GlobPatternError(pattern, "trailing escape character")
            i += 1
            parts.append(re.escape(pattern[i]))
        else:
            parts.append(re.escape(c))
        i += 1

    if in_group:
        raise GlobPatternError(pattern, "unterminated '{'")

    return "".join(parts)


def _translate_class(pattern: str, start: int, parts: list[str]) -> int:
    """Translate a ``[...]`` character class starting at ``start``.

    Neither form ever matches the ``/`` separator.

    Returns:
        Index just past the closing bracket.
    """
    j = start + 1
    negate = j < len(pattern) and pattern[j] in "!^"
    if negate:
        j += 1
    # A leading ']' is a literal member of the set.
    if j < len(pattern) and pattern[j] == "]":
        j += 1
    end = pattern.find("]", j)
    if end == -1:
        raise GlobPatternError(pattern, "unterminated '['")

    body = pattern[start + 1 : end]
    if negate:
        body = body[1:]
    body = body.replace("\\", "\\\\")
    if negate:
        parts.append(f"[^/{body}]")
    else:
        parts.append(f"(?!/)[{body}]")
    return end + 1


class GlobMatcher:
    """A compiled set of glob patterns.

    A path matches the set when it matches at least one pattern.

    Attributes:
        patterns: The original pattern strings, in configured order.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._compiled: list[re.Pattern[str]] = []
        for pattern in self.patterns:
            source = translate(pattern)
            try:
                self._compiled.append(re.compile(source))
            except re.error as e:
                raise GlobPatternError(pattern, str(e)) from e

    def matches(self, path: str | PurePath) -> bool:
        """Check whether a root-relative path matches any pattern.

        Args:
            path: Relative path. ``PurePath`` values are converted to their
                forward-slash form first.

        Returns:
            True if at least one pattern matches the whole path.
        """
        candidate = path.as_posix() if isinstance(path, PurePath) else path
        return any(regex.fullmatch(candidate) for regex in self._compiled)

    def __repr__(self) -> str:
        return f"GlobMatcher(patterns={list(self.patterns)!r})"


def compile_patterns(patterns: Iterable[str]) -> GlobMatcher:
    """Compile glob patterns into a matcher, failing fast on bad input.

    Args:
        patterns: Glob pattern strings.

    Returns:
        GlobMatcher for the given patterns.

    Raises:
        GlobPatternError: If any pattern is malformed.
    """
    return GlobMatcher(patterns)
