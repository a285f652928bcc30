"""Message streams.

A unary message travels as a one-element stream so the same code path serves
every call shape.
"""
from __future__ import annotations

from typing import (
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    Optional,
    Type,
    TypeVar,
    Union,
)

from .codec import Kind, decode
from .metadata import Metadata


T = TypeVar("T")

# An outbound stream of messages; errors are raised as Status
BoxStream = AsyncIterator

TrailersSource = Callable[[], Awaitable[Optional[Metadata]]]


async def once(message: T) -> AsyncIterator[T]:
    """A completed stream holding exactly one message."""
    yield message


async def iter_messages(source: Union[Iterable[T], AsyncIterable[T]]) -> AsyncIterator[T]:
    """Adapt a plain or async iterable into an async stream, preserving order."""
    if hasattr(source, "__aiter__"):
        async for item in source:  # type: ignore[union-attr]
            yield item
    else:
        for item in source:  # type: ignore[union-attr]
            yield item


class Body:
    """Inbound wire body: encoded chunks plus where the trailers come from."""

    def __init__(self, chunks: AsyncIterable[bytes], trailers: Optional[TrailersSource] = None) -> None:
        self._chunks = chunks
        self._trailers = trailers

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunks.__aiter__()

    async def trailers(self) -> Optional[Metadata]:
        if self._trailers is None:
            return None
        return await self._trailers()


class RecvStream(Generic[T]):
    """Decoded inbound message stream. Iteration raises Status on transport errors."""

    def __init__(self, body: Union[Body, AsyncIterable[bytes]], message_type: Type[T], kind: Kind) -> None:
        if not isinstance(body, Body):
            body = Body(body)
        self._body = body
        self._chunks = body.__aiter__()
        self._message_type = message_type
        self._kind = kind

    def __aiter__(self) -> "RecvStream[T]":
        return self

    async def __anext__(self) -> T:
        data = await self._chunks.__anext__()
        return decode(data, self._message_type, self._kind)

    async def try_next(self) -> Optional[T]:
        """Next message, or None once the stream is exhausted."""
        try:
            return await self.__anext__()
        except StopAsyncIteration:
            return None

    async def trailers(self) -> Optional[Metadata]:
        return await self._body.trailers()
