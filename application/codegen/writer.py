from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Tuple


class Fragment:
    """A code fragment: lines with indentation depth relative to where it is written."""

    __slots__ = ("lines",)

    def __init__(self) -> None:
        self.lines: List[Tuple[int, str]] = []

    def add(self, text: str = "", depth: int = 0) -> "Fragment":
        self.lines.append((depth, text))
        return self

    def extend(self, other: "Fragment", depth: int = 0) -> "Fragment":
        for line_depth, text in other.lines:
            self.lines.append((line_depth + depth, text))
        return self

    def render(self, indent: str = "    ") -> str:
        return "\n".join(indent * depth + text if text else "" for depth, text in self.lines)

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


class CodeWriter:
    """Accumulates Python source with block indentation."""

    def __init__(self, indent_width: int = 4) -> None:
        self._indent = " " * indent_width
        self._lines: List[str] = []
        self._level = 0

    def line(self, text: str = "") -> None:
        self._lines.append(self._indent * self._level + text if text else "")

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._lines.append("")

    def fragment(self, fragment: Fragment) -> None:
        for depth, text in fragment:
            self._lines.append(self._indent * (self._level + depth) + text if text else "")

    @contextmanager
    def indent(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        self.line(header)
        with self.indent():
            yield

    def render(self) -> str:
        # trailing blank lines collapse into the final newline
        lines = list(self._lines)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"
