"""Runtime library for stubs generated by stub-forge.

Generated modules only reach into this namespace:
- `Request`/`Response`, `Metadata`, `Extensions` and `Status`/`Code`.
- `Body`, `RecvStream`, `BoxStream` and `once` for the uniform message stream.
- `SendEntryMessage`/`RecvEntryMessage` as envelope bases.
- `Client`, `ClientBuilder`, `CallOpt`, `SetClient` on the calling side.
- `Service`, `Server`, `ServerContext` and `RpcInfo` on the serving side.
"""

from .codec import Kind, decode, encode
from .envelope import RecvEntryMessage, SendEntryMessage
from .message import (
    IntoRequest,
    IntoStreamingRequest,
    Request,
    Response,
    into_request,
    into_streaming_request,
)
from .metadata import Extensions, Metadata
from .status import Code, Status
from .stream import Body, BoxStream, RecvStream, iter_messages, once
from .client import CallOpt, Client, ClientBuilder, SetClient
from .server import RpcInfo, Server, ServerContext, Service

__all__ = [
    "Body",
    "BoxStream",
    "CallOpt",
    "Client",
    "ClientBuilder",
    "Code",
    "Extensions",
    "IntoRequest",
    "IntoStreamingRequest",
    "Kind",
    "Metadata",
    "RecvEntryMessage",
    "RecvStream",
    "Request",
    "Response",
    "RpcInfo",
    "SendEntryMessage",
    "Server",
    "ServerContext",
    "Service",
    "SetClient",
    "Status",
    "decode",
    "encode",
    "into_request",
    "into_streaming_request",
    "iter_messages",
    "once",
]
