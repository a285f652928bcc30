"""Dispatch Path Builder: wire paths and the two path tables built from them."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, List, Tuple

from domain.ir.entity import Method
from domain.common.exceptions import PathCollisionException
from .envelope import METHOD_NOT_FOUND
from .writer import Fragment


def _literal(text: str) -> str:
    return json.dumps(text)


def method_path(package: str, service: str, method: str) -> str:
    """`/{package}.{service}/{method}`, or `/{service}/{method}` outside any package."""
    if package:
        return f"/{package}.{service}/{method}"
    return f"/{service}/{method}"


@dataclass(frozen=True, slots=True)
class DispatchEntry:
    path: str
    variant: str
    method: Method


class DispatchTable:
    """Ordered path -> (variant, method) entries of one service."""

    def __init__(self, entries: List[DispatchEntry]) -> None:
        seen: set[str] = set()
        for entry in entries:
            if entry.path in seen:
                raise PathCollisionException(entry.path)
            seen.add(entry.path)
        self.entries = entries

    @property
    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries]

    def decode_arms(self, rt: str, message_type_of: Callable[[DispatchEntry], str]) -> Fragment:
        """Body of a Recv envelope's `from_body`: path -> variant, else UNIMPLEMENTED."""
        fragment = Fragment()
        for entry in self.entries:
            fragment.add(f"if method == {_literal(entry.path)}:")
            fragment.add(
                f"return cls(cls.Variant.{entry.variant}, "
                f"{rt}.RecvStream(body, {message_type_of(entry)}, kind))",
                1,
            )
        fragment.add(f'raise {rt}.Status.new({rt}.Code.UNIMPLEMENTED, "{METHOD_NOT_FOUND}")')
        return fragment

    def route_arms(self, rt: str, arm_of: Callable[[DispatchEntry], Fragment]) -> Fragment:
        """Body of the server's `call`: one arm per path, then the unknown-path fallback."""
        fragment = Fragment()
        for entry in self.entries:
            fragment.add(f"if path == {_literal(entry.path)}:")
            fragment.extend(arm_of(entry), 1)
        fragment.add(f'raise {rt}.Status.unimplemented(f"Unimplemented http path: {{path}}")')
        return fragment

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def build_table(package: str, service: str, methods: List[Tuple[Method, str]]) -> DispatchTable:
    """`methods` pairs each method with its envelope variant name."""
    return DispatchTable(
        [DispatchEntry(method_path(package, service, method.name), variant, method) for method, variant in methods]
    )
