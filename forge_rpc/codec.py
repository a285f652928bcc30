"""Message codec glue.

Byte-level encoding belongs to protobuf; this module only applies it to
message streams and maps decode failures onto a Status.
"""
from __future__ import annotations

import enum
from typing import AsyncIterable, AsyncIterator, Type, TypeVar

from google.protobuf.message import DecodeError

from .status import Code, Status


T = TypeVar("T")


class Kind(enum.Enum):
    REQUEST = "request"
    RESPONSE = "response"


async def encode(stream: AsyncIterable[T]) -> AsyncIterator[bytes]:
    async for message in stream:
        yield message.SerializeToString()  # type: ignore[attr-defined]


def decode(data: bytes, message_type: Type[T], kind: Kind) -> T:
    try:
        return message_type.FromString(data)  # type: ignore[attr-defined]
    except DecodeError as exc:
        raise Status(Code.INTERNAL, f"Failed to decode {kind.value} message: {exc}") from exc
