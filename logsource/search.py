"""Line matching criteria used to filter or search log lines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


class SearchKind(Enum):
    """The ways a line can be tested against a search."""

    REGEX = "regex"
    NEG = "neg"
    RAW = "raw"
    NONE = "none"


Pattern = Union["re.Pattern[str]", str, None]


@dataclass(frozen=True)
class SearchType:
    """A search criterion: a regex, a negated regex, a raw substring, or nothing."""

    kind: SearchKind = SearchKind.NONE
    pattern: Pattern = None

    def __post_init__(self) -> None:
        if self.kind in (SearchKind.REGEX, SearchKind.NEG):
            if isinstance(self.pattern, str):
                object.__setattr__(self, "pattern", re.compile(self.pattern))
            elif not isinstance(self.pattern, re.Pattern):
                raise TypeError(f"{self.kind.name} search needs a regular expression")
        elif self.kind is SearchKind.RAW:
            if not isinstance(self.pattern, str):
                raise TypeError("RAW search needs a string")
        elif self.pattern is not None:
            raise TypeError("NONE search takes no pattern")

    @classmethod
    def parse(cls, text: str) -> SearchType:
        """Build a search from user text; a leading '!' negates the regex.

        Raises re.error when the expression is invalid.
        """
        if not text:
            return cls(SearchKind.NONE)
        if text.startswith("!"):
            return cls(SearchKind.NEG, re.compile(text[1:]))
        return cls(SearchKind.REGEX, re.compile(text))

    def matches(self, line: str) -> bool:
        """Return True if the line satisfies this search."""
        if self.kind is SearchKind.REGEX:
            return self.pattern.search(line) is not None
        if self.kind is SearchKind.NEG:
            return self.pattern.search(line) is None
        if self.kind is SearchKind.RAW:
            return self.pattern in line
        return True

    def __str__(self) -> str:
        if self.kind is SearchKind.REGEX:
            return f'"{self.pattern.pattern}"'
        if self.kind is SearchKind.NEG:
            return f'"!{self.pattern.pattern}"'
        if self.kind is SearchKind.RAW:
            return f"Raw({self.pattern})"
        return "None"


def trim_newline(line: str) -> str:
    """Strip a single trailing LF from a line."""
    return line[:-1] if line.endswith("\n") else line