"""Declarative text patches applied to generated project files."""
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Union


@dataclass(frozen=True)
class Block:
    """A region delimited by a start marker line and an end marker line."""

    start: str
    end: str


Matcher = Union[str, Pattern, Block]


@dataclass(frozen=True)
class PatchSpec:
    """A single patch: replace every match in path with replacement.

    A replacement of None removes the matched text.
    """

    path: str
    matcher: Matcher
    replacement: Optional[str] = None

    @property
    def kind(self) -> str:
        if isinstance(self.matcher, Block):
            return "block"
        if isinstance(self.matcher, re.Pattern):
            return "regex"
        return "literal"
