"""Transport client over a grpc.aio channel.

Every call shape goes through a generic stream-stream call: a unary message is
a one-element stream on the wire too, so the generated code needs a single
path-addressed `call`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Generic, Optional, Type, TypeVar

import grpc

from core.config import settings
from core.logging_config import get_logger
from .codec import Kind
from .envelope import RecvEntryMessage, SendEntryMessage
from .message import Request, Response
from .metadata import Extensions, Metadata
from .status import Status
from .stream import Body


logger = get_logger(__name__)

C = TypeVar("C", bound="SetClient")


@dataclass(slots=True)
class CallOpt:
    """Per-call options applied to every call made through a client."""

    timeout: Optional[float] = None
    metadata: Metadata = field(default_factory=Metadata)
    wait_for_ready: Optional[bool] = None
    compression: Optional[grpc.Compression] = None


async def _iter_call(call: grpc.aio.StreamStreamCall) -> AsyncIterator[bytes]:
    try:
        async for chunk in call:
            yield chunk
    except grpc.aio.AioRpcError as exc:
        raise Status.from_rpc_error(exc) from exc


class Client:
    """Generic transport client bound to one channel and one response envelope type."""

    def __init__(
        self,
        channel: grpc.aio.Channel,
        response_type: Type[RecvEntryMessage],
        callopt: Optional[CallOpt] = None,
    ) -> None:
        self._channel = channel
        self._response_type = response_type
        self._callopt = callopt or CallOpt(timeout=settings.grpc.timeout)

    @property
    def channel(self) -> grpc.aio.Channel:
        return self._channel

    def set_callopt(self, callopt: CallOpt) -> None:
        self._callopt = callopt

    async def call(self, path: str, request: Request[SendEntryMessage]) -> Response[RecvEntryMessage]:
        metadata = self._callopt.metadata.copy()
        metadata.merge(request.metadata)

        multicallable = self._channel.stream_stream(path)
        call = multicallable(
            request.message.into_body(),
            timeout=self._callopt.timeout,
            metadata=metadata.to_grpc() or None,
            wait_for_ready=self._callopt.wait_for_ready,
            compression=self._callopt.compression,
        )
        logger.debug("rpc_call_started", path=path)

        initial = await call.initial_metadata()

        async def _trailers() -> Optional[Metadata]:
            trailing = await call.trailing_metadata()
            return Metadata.from_grpc(trailing) if trailing else None

        body = Body(_iter_call(call), trailers=_trailers)
        message = self._response_type.from_body(path, body, Kind.RESPONSE)
        return Response.from_parts(Metadata.from_grpc(initial), Extensions(), message)

    async def close(self) -> None:
        await self._channel.close()


class SetClient:
    """Mixin for generated clients: holds the transport client wired in by the builder."""

    def __init__(self, client: Optional[Client] = None) -> None:
        self.client = client

    def set_client(self: C, client: Client) -> C:
        return type(self)(client)

    def require_client(self) -> Client:
        if self.client is None:
            raise RuntimeError(f"{type(self).__name__} has no transport client; build it with its ClientBuilder")
        return self.client


class ClientBuilder(Generic[C]):
    """Wires a transport Client into a generated client."""

    def __init__(self, inner: C, service_name: str, response_type: Type[RecvEntryMessage]) -> None:
        self._inner = inner
        self._service_name = service_name
        self._response_type = response_type
        self._target: Optional[str] = None
        self._channel: Optional[grpc.aio.Channel] = None
        self._callopt: Optional[CallOpt] = None
        self._options: list[tuple[str, object]] = []

    @property
    def service_name(self) -> str:
        return self._service_name

    def address(self, target: str) -> "ClientBuilder[C]":
        self._target = target
        return self

    def channel(self, channel: grpc.aio.Channel) -> "ClientBuilder[C]":
        """Use an existing channel instead of opening one."""
        self._channel = channel
        return self

    def callopt(self, callopt: CallOpt) -> "ClientBuilder[C]":
        self._callopt = callopt
        return self

    def option(self, key: str, value: object) -> "ClientBuilder[C]":
        self._options.append((key, value))
        return self

    def build(self) -> C:
        channel = self._channel
        if channel is None:
            target = self._target or settings.grpc.target
            channel = grpc.aio.insecure_channel(target, options=self._options or None)
            logger.info("grpc_channel_opened", service=self._service_name, target=target)
        return self._inner.set_client(Client(channel, self._response_type, self._callopt))
