"""Generated client and server wired together in process."""
import pytest
from google.protobuf import wrappers_pb2

import forge_rpc
from forge_rpc import Code, Metadata, Status

from conftest import ScriptedTransport


pytestmark = pytest.mark.asyncio


def text(value: str) -> wrappers_pb2.StringValue:
    return wrappers_pb2.StringValue(value=value)


async def _chunks(*messages):
    for message in messages:
        yield message.SerializeToString()


async def test_unary_round_trip(loopback_client):
    client, transport = loopback_client
    resp = await client.say_hello(text("world"))
    assert resp.message.value == "hello world"
    assert resp.metadata.get("x-greeter") == "unary"
    assert transport.paths == ["/helloworld.Greeter/SayHello"]


async def test_unary_request_metadata_reaches_the_handler(loopback_client, fake_greeter):
    client, _ = loopback_client
    req = forge_rpc.Request.new(text("md"))
    req.metadata.insert("x-caller", "tests")
    await client.say_hello(req)
    assert fake_greeter.seen_metadata.get("x-caller") == "tests"


async def test_client_streaming_preserves_order(loopback_client):
    client, _ = loopback_client
    resp = await client.collect([text("a"), text("b"), text("c")])
    assert resp.message.value == "a,b,c"


async def test_client_streaming_accepts_async_iterables(loopback_client):
    client, _ = loopback_client

    async def _source():
        for value in ("x", "y"):
            yield text(value)

    resp = await client.collect(_source())
    assert resp.message.value == "x,y"


async def test_server_streaming_preserves_order_and_count(loopback_client):
    client, _ = loopback_client
    resp = await client.subscribe(text("tick"))
    assert [m.value async for m in resp.message] == ["tick-0", "tick-1", "tick-2"]


async def test_bidi_streaming(loopback_client):
    client, _ = loopback_client
    resp = await client.chat([text("a"), text("b")])
    assert [m.value async for m in resp.message] == ["A", "B"]


async def test_trailers_are_merged_into_unary_response_metadata(greeter_module):
    transport = ScriptedTransport(
        greeter_module.GreeterResponseRecv,
        lambda: _chunks(text("ok")),
        metadata=Metadata([("x-lead", "1")]),
        trailers=Metadata([("x-trail", "2"), ("x-lead", "3")]),
    )
    resp = await greeter_module.GreeterClient(transport).say_hello(text("q"))
    assert resp.message.value == "ok"
    assert resp.metadata.get("x-trail") == "2"
    assert resp.metadata.get_all("x-lead") == ["1", "3"]


async def test_missing_response_message_is_internal(greeter_module):
    transport = ScriptedTransport(greeter_module.GreeterResponseRecv, lambda: _chunks())
    with pytest.raises(Status) as ei:
        await greeter_module.GreeterClient(transport).say_hello(text("q"))
    assert ei.value.code == Code.INTERNAL
    assert ei.value.message == "Missing response message."


async def test_client_unary_error_carries_leading_metadata(greeter_module):
    async def _failing():
        raise Status(Code.NOT_FOUND, "gone", Metadata([("x-reason", "deleted")]))
        yield b""  # pragma: no cover

    transport = ScriptedTransport(
        greeter_module.GreeterResponseRecv,
        _failing,
        metadata=Metadata([("x-lead", "1")]),
    )
    with pytest.raises(Status) as ei:
        await greeter_module.GreeterClient(transport).say_hello(text("q"))
    assert ei.value.code == Code.NOT_FOUND
    assert ei.value.message == "gone"
    assert ei.value.metadata.get("x-reason") == "deleted"
    assert ei.value.metadata.get("x-lead") == "1"


async def test_client_streaming_response_errors_propagate_as_is(greeter_module):
    async def _failing():
        yield text("first").SerializeToString()
        raise Status(Code.UNAVAILABLE, "dropped")

    transport = ScriptedTransport(
        greeter_module.GreeterResponseRecv,
        _failing,
        metadata=Metadata([("x-lead", "1")]),
    )
    resp = await greeter_module.GreeterClient(transport).subscribe(text("q"))
    assert (await resp.message.try_next()).value == "first"
    with pytest.raises(Status) as ei:
        await resp.message.try_next()
    assert ei.value.code == Code.UNAVAILABLE
    assert "x-lead" not in ei.value.metadata


def _server_request(greeter_module, path, variant, chunks, trailers=None, metadata=None):
    body = forge_rpc.Body(chunks, trailers=trailers)
    stream = forge_rpc.RecvStream(body, wrappers_pb2.StringValue, forge_rpc.Kind.REQUEST)
    envelope = greeter_module.GreeterRequestRecv(variant, stream)
    cx = forge_rpc.ServerContext(rpc_info=forge_rpc.RpcInfo(method=path))
    req = forge_rpc.Request.new(envelope)
    if metadata is not None:
        req.metadata.merge(metadata)
    return cx, req


async def test_missing_request_message_is_internal(greeter_module, fake_greeter):
    server = greeter_module.GreeterServer(fake_greeter)
    variant = greeter_module.GreeterRequestRecv.Variant.SayHello
    cx, req = _server_request(greeter_module, "/helloworld.Greeter/SayHello", variant, _chunks())
    with pytest.raises(Status) as ei:
        await server.call(cx, req)
    assert ei.value.code == Code.INTERNAL
    assert ei.value.message == "Missing request message."


async def test_unknown_path_is_unimplemented(greeter_module, fake_greeter):
    server = greeter_module.GreeterServer(fake_greeter)
    variant = greeter_module.GreeterRequestRecv.Variant.SayHello
    cx, req = _server_request(greeter_module, "/helloworld.Greeter/Nope", variant, _chunks(text("x")))
    with pytest.raises(Status) as ei:
        await server.call(cx, req)
    assert ei.value.code == Code.UNIMPLEMENTED
    assert ei.value.message == "Unimplemented http path: /helloworld.Greeter/Nope"


async def test_mismatched_variant_is_unimplemented(greeter_module, fake_greeter):
    server = greeter_module.GreeterServer(fake_greeter)
    variant = greeter_module.GreeterRequestRecv.Variant.Chat
    cx, req = _server_request(greeter_module, "/helloworld.Greeter/SayHello", variant, _chunks(text("x")))
    with pytest.raises(Status) as ei:
        await server.call(cx, req)
    assert ei.value.code == Code.UNIMPLEMENTED
    assert ei.value.message == "Method not found."


async def test_decoding_an_unknown_path_is_unimplemented(greeter_module):
    with pytest.raises(Status) as ei:
        greeter_module.GreeterResponseRecv.from_body("/other.Svc/Do", forge_rpc.Body(_chunks()), forge_rpc.Kind.RESPONSE)
    assert ei.value.code == Code.UNIMPLEMENTED
    assert ei.value.message == "Method not found."


async def test_server_unary_request_merges_trailers(greeter_module, fake_greeter):
    async def _trailers():
        return Metadata([("x-trail", "t"), ("x-lead", "2")])

    server = greeter_module.GreeterServer(fake_greeter)
    variant = greeter_module.GreeterRequestRecv.Variant.SayHello
    cx, req = _server_request(
        greeter_module,
        "/helloworld.Greeter/SayHello",
        variant,
        _chunks(text("x")),
        trailers=_trailers,
        metadata=Metadata([("x-lead", "1")]),
    )
    resp = await server.call(cx, req)
    assert fake_greeter.seen_metadata.get("x-trail") == "t"
    assert fake_greeter.seen_metadata.get_all("x-lead") == ["1", "2"]
    assert resp.message.variant is greeter_module.GreeterResponseSend.Variant.SayHello


async def test_server_unary_request_errors_propagate_unchanged(greeter_module, fake_greeter):
    failure = Status(Code.DATA_LOSS, "broken upload", Metadata([("x-reason", "truncated")]))

    async def _failing():
        raise failure
        yield b""  # pragma: no cover

    server = greeter_module.GreeterServer(fake_greeter)
    variant = greeter_module.GreeterRequestRecv.Variant.SayHello
    cx, req = _server_request(
        greeter_module,
        "/helloworld.Greeter/SayHello",
        variant,
        _failing(),
        metadata=Metadata([("x-lead", "1")]),
    )
    with pytest.raises(Status) as ei:
        await server.call(cx, req)
    assert ei.value is failure
    assert ei.value.code == Code.DATA_LOSS
    assert ei.value.metadata == Metadata([("x-reason", "truncated")])
    assert fake_greeter.seen_metadata is None
