# chunkseries/core/naming.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePosixPath, PurePath
from typing import Callable, Protocol, runtime_checkable
import re

from .exceptions import InvalidChannel


# Any callable mapping a slot start (UTC) to a path relative to the data root.
NamingFunction = Callable[[datetime], str]

# datetime field <- strftime directives that set it
_FIELDS = (
    ("year", "Yy"),
    ("month", "mbBj"),
    ("day", "dj"),
    ("hour", "HI"),
    ("minute", "M"),
    ("second", "S"),
    ("microsecond", "f"),
)
_DIRECTIVE = re.compile(r"%(.)")


@runtime_checkable
class ParsableNaming(Protocol):
    """Naming function that can also map a relative path back to its slot start."""

    def __call__(self, start: datetime) -> str: ...

    def parse(self, relative_path: str | PurePath) -> datetime | None: ...


@dataclass(frozen=True, slots=True)
class PathTemplate:
    """
    strftime-based naming template, e.g. "%Y-%m/%Y-%m-%d_%H-%M-%S.dat".

    Folders use "/" regardless of the host platform. Parsing matches each
    path component against the pattern component at the same depth, merges
    the fields they define (later components win) and then checks that
    formatting the result reproduces the whole relative path.
    """
    pattern: str

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, str) or not self.pattern.strip():
            raise InvalidChannel("PathTemplate.pattern must be a non-empty string.")

    def __call__(self, start: datetime) -> str:
        return start.strftime(self.pattern)

    def parse(self, relative_path: str | PurePath) -> datetime | None:
        rel = PurePosixPath(*PurePath(relative_path).parts)
        patterns = self.pattern.split("/")
        if len(rel.parts) != len(patterns):
            return None

        fields = {"year": 1900, "month": 1, "day": 1}
        for part, pattern in zip(rel.parts, patterns):
            try:
                parsed = datetime.strptime(part, pattern)
            except ValueError:
                return None
            directives = set(_DIRECTIVE.findall(pattern))
            for name, codes in _FIELDS:
                if directives.intersection(codes):
                    fields[name] = getattr(parsed, name)

        try:
            start = datetime(**fields, tzinfo=timezone.utc)
        except ValueError:
            return None

        if self(start) != rel.as_posix():
            return None
        return start
