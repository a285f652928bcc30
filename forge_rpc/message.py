from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Callable, Generic, Iterable, Tuple, TypeVar, Union

from .metadata import Extensions, Metadata
from .stream import iter_messages


T = TypeVar("T")
U = TypeVar("U")


@dataclass(slots=True)
class Request(Generic[T]):
    message: T
    metadata: Metadata = field(default_factory=Metadata)
    extensions: Extensions = field(default_factory=Extensions)

    @classmethod
    def new(cls, message: T) -> "Request[T]":
        return cls(message)

    @classmethod
    def from_parts(cls, metadata: Metadata, extensions: Extensions, message: T) -> "Request[T]":
        return cls(message, metadata, extensions)

    def into_parts(self) -> Tuple[Metadata, Extensions, T]:
        return self.metadata, self.extensions, self.message

    def map(self, fn: Callable[[T], U]) -> "Request[U]":
        return Request(fn(self.message), self.metadata, self.extensions)


@dataclass(slots=True)
class Response(Generic[T]):
    message: T
    metadata: Metadata = field(default_factory=Metadata)
    extensions: Extensions = field(default_factory=Extensions)

    @classmethod
    def new(cls, message: T) -> "Response[T]":
        return cls(message)

    @classmethod
    def from_parts(cls, metadata: Metadata, extensions: Extensions, message: T) -> "Response[T]":
        return cls(message, metadata, extensions)

    def into_parts(self) -> Tuple[Metadata, Extensions, T]:
        return self.metadata, self.extensions, self.message

    def map(self, fn: Callable[[T], U]) -> "Response[U]":
        return Response(fn(self.message), self.metadata, self.extensions)


# Anything a unary client method accepts: a bare message or a prepared Request
IntoRequest = Union[T, Request[T]]

# Anything a streaming client method accepts: messages as a (async) iterable,
# optionally already wrapped in a Request to carry metadata
IntoStreamingRequest = Union[
    Iterable[T],
    AsyncIterable[T],
    Request[Iterable[T]],
    Request[AsyncIterable[T]],
]


def into_request(value: IntoRequest[T]) -> Request[T]:
    if isinstance(value, Request):
        return value
    return Request.new(value)


def into_streaming_request(value: IntoStreamingRequest[T]) -> Request[AsyncIterator[T]]:
    if not isinstance(value, Request):
        value = Request.new(value)
    return value.map(iter_messages)
