"""Envelope base classes.

Generated code derives four envelopes per service, each a tagged union: an
`enum.Enum` member naming the method plus that method's message stream.
"""
from __future__ import annotations

import enum
from typing import Any, AsyncIterator, Optional

from .codec import Kind, encode
from .stream import Body


class SendEntryMessage:
    """Outbound envelope. `stream` is an async iterator of messages."""

    __slots__ = ("variant", "stream")

    def __init__(self, variant: enum.Enum, stream: Any) -> None:
        self.variant = variant
        self.stream = stream

    def into_body(self) -> AsyncIterator[bytes]:
        return encode(self.stream)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.variant.name})"


class RecvEntryMessage:
    """Inbound envelope. `stream` is a RecvStream decoding the wire body."""

    __slots__ = ("variant", "stream")

    def __init__(self, variant: enum.Enum, stream: Any) -> None:
        self.variant = variant
        self.stream = stream

    @classmethod
    def from_body(cls, method: Optional[str], body: Body, kind: Kind) -> "RecvEntryMessage":
        """Pick the variant for `method` and wrap `body`; unknown paths raise UNIMPLEMENTED."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.variant.name})"
