"""Server side: the generic service contract and its grpc.aio adapter."""
from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Sequence, Type

import grpc
from grpc_health.v1 import health, health_pb2, health_pb2_grpc

from core.config import settings
from core.logging_config import get_logger
from .codec import Kind
from .envelope import RecvEntryMessage, SendEntryMessage
from .message import Request, Response
from .metadata import Metadata
from .status import Status
from .stream import Body


logger = get_logger(__name__)


@dataclass(slots=True)
class RpcInfo:
    method: Optional[str] = None


@dataclass(slots=True)
class ServerContext:
    rpc_info: RpcInfo
    peer: Optional[str] = None


class Service(abc.ABC):
    """Single dispatch entry point, implemented by every generated server."""

    @abc.abstractmethod
    async def call(
        self, cx: ServerContext, req: Request[RecvEntryMessage]
    ) -> Response[SendEntryMessage]:
        ...


class _GenericHandler(grpc.GenericRpcHandler):
    def __init__(self, server: "Server") -> None:
        self._server = server

    def service(self, handler_call_details: grpc.HandlerCallDetails) -> Optional[grpc.RpcMethodHandler]:
        method = handler_call_details.method
        # other services on the same grpc server keep their own handlers
        if not method.startswith(self._server.path_prefix):
            return None
        invocation_metadata = handler_call_details.invocation_metadata

        async def _stream_stream(request_iterator, context: grpc.aio.ServicerContext):
            async for chunk in self._server.handle(method, invocation_metadata, request_iterator, context):
                yield chunk

        # no (de)serializers: envelopes own the codec
        return grpc.stream_stream_rpc_method_handler(_stream_stream)


class Server:
    """Adapts a Service to grpc.aio. Every registered path is served as a stream-stream call."""

    def __init__(self, service: Service, request_type: Type[RecvEntryMessage], service_name: str) -> None:
        self.service = service
        self.request_type = request_type
        self.service_name = service_name
        # Port bound by the last serve() call; useful with ephemeral ":0" addresses
        self.port: Optional[int] = None

    @property
    def path_prefix(self) -> str:
        return f"/{self.service_name}/"

    def generic_handler(self) -> grpc.GenericRpcHandler:
        return _GenericHandler(self)

    def add_to_server(self, server: grpc.aio.Server) -> None:
        server.add_generic_rpc_handlers((self.generic_handler(),))

    async def handle(
        self,
        method: str,
        invocation_metadata: Optional[Sequence[tuple]],
        request_iterator: AsyncIterator[bytes],
        context: grpc.aio.ServicerContext,
    ) -> AsyncIterator[bytes]:
        peer = context.peer() if hasattr(context, "peer") else None
        cx = ServerContext(rpc_info=RpcInfo(method=method), peer=peer)
        logger.debug("rpc_request", method=method, peer=peer)
        try:
            message = self.request_type.from_body(method, Body(request_iterator), Kind.REQUEST)
            req = Request(message, Metadata.from_grpc(invocation_metadata))
            resp = await self.service.call(cx, req)
            await context.send_initial_metadata(resp.metadata.to_grpc())
            async for chunk in resp.message.into_body():
                yield chunk
        except Status as status:
            logger.info(
                "rpc_status_aborted",
                method=method,
                status=status.code.name,
                message=status.message,
            )
            await context.abort(status.code, status.message, trailing_metadata=status.metadata.to_grpc())

    async def serve(self, address: Optional[str] = None) -> grpc.aio.Server:
        """Start a grpc.aio server with this service and the health service registered."""
        options = [
            ("grpc.max_concurrent_streams", max(1, settings.grpc.max_concurrent_streams)),
        ]
        server = grpc.aio.server(options=options)

        health_svc = health.HealthServicer()
        health_pb2_grpc.add_HealthServicer_to_server(health_svc, server)
        health_svc.set("", health_pb2.HealthCheckResponse.SERVING)
        health_svc.set(self.service_name, health_pb2.HealthCheckResponse.SERVING)

        self.add_to_server(server)

        address = address or f"{settings.grpc.host}:{settings.grpc.port}"
        self.port = server.add_insecure_port(address)
        await server.start()
        logger.info("grpc_started", service=self.service_name, address=address, port=self.port)
        return server
