"""Pytest bootstrap configuration.

Shared fixtures: a four-method Greeter IR over protobuf's StringValue, the
module generated from it (imported from a temporary directory) and an
in-process transport that routes client calls into a generated server
without a network.
"""
import importlib.util
import sys
from typing import Any, Callable, Optional

import pytest
from google.protobuf import wrappers_pb2

import forge_rpc
from application.codegen.emitter import ServiceEmitter
from infrastructure.ir.memory_database import InMemoryIrDatabase


MESSAGE_MODULE = "google.protobuf.wrappers_pb2"


def build_greeter_db(package: str = "helloworld") -> InMemoryIrDatabase:
    db = InMemoryIrDatabase()
    file = db.add_file(package)
    text = db.add_message(file, "StringValue", MESSAGE_MODULE)
    methods = [
        db.add_method("SayHello", text, text),
        db.add_method("Collect", text, text, client_streaming=True),
        db.add_method("Subscribe", text, text, server_streaming=True),
        db.add_method("Chat", text, text, client_streaming=True, server_streaming=True),
    ]
    db.add_service(file, "Greeter", methods)
    return db


def import_source(tmp_dir, module_name: str, source: str):
    path = tmp_dir / f"{module_name}.py"
    path.write_text(source, encoding="utf-8")
    module_spec = importlib.util.spec_from_file_location(module_name, path)
    module = importlib.util.module_from_spec(module_spec)
    sys.modules[module_name] = module
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def greeter_db() -> InMemoryIrDatabase:
    return build_greeter_db()


@pytest.fixture(scope="session")
def greeter_source() -> str:
    db = build_greeter_db()
    emitter = ServiceEmitter(db, header="Code generated for tests.")
    return emitter.emit(db.services()[0]).source


@pytest.fixture(scope="session")
def greeter_module(tmp_path_factory, greeter_source):
    module = import_source(tmp_path_factory.mktemp("generated"), "greeter_forge", greeter_source)
    yield module
    sys.modules.pop("greeter_forge", None)


def text(value: str) -> wrappers_pb2.StringValue:
    return wrappers_pb2.StringValue(value=value)


class FakeGreeter:
    """Handler behind the generated Greeter interface; records what it saw."""

    def __init__(self) -> None:
        self.seen_metadata: Optional[forge_rpc.Metadata] = None

    async def say_hello(self, req):
        self.seen_metadata = req.metadata
        resp = forge_rpc.Response.new(text(f"hello {req.message.value}"))
        resp.metadata.insert("x-greeter", "unary")
        return resp

    async def collect(self, req):
        values = [m.value async for m in req.message]
        return forge_rpc.Response.new(text(",".join(values)))

    async def subscribe(self, req):
        prefix = req.message.value

        async def _gen():
            for i in range(3):
                yield text(f"{prefix}-{i}")

        return forge_rpc.Response.new(_gen())

    async def chat(self, req):
        async def _echo():
            async for m in req.message:
                yield text(m.value.upper())

        return forge_rpc.Response.new(_echo())


@pytest.fixture
def fake_greeter() -> FakeGreeter:
    return FakeGreeter()


class LoopbackTransport:
    """Stands in for forge_rpc.Client: encodes, routes and decodes in process."""

    def __init__(
        self,
        service: forge_rpc.Service,
        request_type,
        response_type,
        trailers: Optional[forge_rpc.Metadata] = None,
    ) -> None:
        self.service = service
        self.request_type = request_type
        self.response_type = response_type
        self.trailers = trailers
        self.paths = []

    async def call(self, path: str, request: forge_rpc.Request) -> forge_rpc.Response:
        self.paths.append(path)
        envelope = self.request_type.from_body(path, forge_rpc.Body(request.message.into_body()), forge_rpc.Kind.REQUEST)
        cx = forge_rpc.ServerContext(rpc_info=forge_rpc.RpcInfo(method=path))
        resp = await self.service.call(cx, forge_rpc.Request.from_parts(request.metadata, request.extensions, envelope))

        async def _trailers() -> Optional[forge_rpc.Metadata]:
            return self.trailers

        body = forge_rpc.Body(resp.message.into_body(), trailers=_trailers)
        message = self.response_type.from_body(path, body, forge_rpc.Kind.RESPONSE)
        return forge_rpc.Response.from_parts(resp.metadata, forge_rpc.Extensions(), message)


class ScriptedTransport:
    """Returns a canned response body for any call."""

    def __init__(self, response_type, chunks: Callable[[], Any], metadata=None, trailers=None) -> None:
        self.response_type = response_type
        self.chunks = chunks
        self.metadata = metadata if metadata is not None else forge_rpc.Metadata()
        self.trailers = trailers

    async def call(self, path: str, request: forge_rpc.Request) -> forge_rpc.Response:
        async def _trailers():
            return self.trailers

        body = forge_rpc.Body(self.chunks(), trailers=_trailers)
        message = self.response_type.from_body(path, body, forge_rpc.Kind.RESPONSE)
        return forge_rpc.Response.from_parts(self.metadata, forge_rpc.Extensions(), message)


@pytest.fixture
def loopback_client(greeter_module, fake_greeter):
    server = greeter_module.GreeterServer(fake_greeter)
    transport = LoopbackTransport(server, greeter_module.GreeterRequestRecv, greeter_module.GreeterResponseRecv)
    return greeter_module.GreeterClient(transport), transport
