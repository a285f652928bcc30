"""Envelope Shape Builder.

One template per (role, direction); the streaming flag only decides whether a
single message is pulled out of the stream or the stream is passed through.
Unary messages ride in one-element streams, so four templates cover all
sixteen role x direction x shape combinations.
"""
from __future__ import annotations

from .writer import Fragment


METHOD_NOT_FOUND = "Method not found."
MISSING_REQUEST = "Missing request message."
MISSING_RESPONSE = "Missing response message."


class EnvelopeShapeBuilder:
    def __init__(self, rt: str) -> None:
        self.rt = rt

    def _unimplemented(self) -> str:
        return f'raise {self.rt}.Status.new({self.rt}.Code.UNIMPLEMENTED, "{METHOD_NOT_FOUND}")'

    def _internal(self, message: str) -> str:
        return f'raise {self.rt}.Status.internal("{message}")'

    def _open_envelope(self, source: str, enum_name: str, variant: str) -> Fragment:
        return (
            Fragment()
            .add(f"metadata, extensions, envelope = {source}.into_parts()")
            .add(f"if envelope.variant is not {enum_name}.Variant.{variant}:")
            .add(self._unimplemented(), 1)
            .add("message_stream = envelope.stream")
        )

    def _merge_trailers(self) -> Fragment:
        return (
            Fragment()
            .add("trailers = await message_stream.trailers()")
            .add("if trailers is not None:")
            .add("metadata.merge(trailers)", 1)
        )

    def client_request(self, streaming: bool) -> Fragment:
        """Turn the caller's `requests` into `req`, a Request of a message stream."""
        rt = self.rt
        if streaming:
            return Fragment().add(f"req = {rt}.into_streaming_request(requests)")
        return Fragment().add(f"req = {rt}.into_request(requests).map({rt}.once)")

    def client_response(self, enum_name: str, variant: str, streaming: bool) -> Fragment:
        """Unwrap `resp` and return the typed Response."""
        rt = self.rt
        fragment = self._open_envelope("resp", enum_name, variant)
        if streaming:
            return fragment.add(f"return {rt}.Response.from_parts(metadata, extensions, message_stream)")
        return (
            fragment
            .add("try:")
            .add("message = await message_stream.try_next()", 1)
            .add(f"except {rt}.Status as status:")
            .add("status.metadata.merge(metadata.copy())", 1)
            .add("raise", 1)
            .add("if message is None:")
            .add(self._internal(MISSING_RESPONSE), 1)
            .extend(self._merge_trailers())
            .add(f"return {rt}.Response.from_parts(metadata, extensions, message)")
        )

    def server_request(self, enum_name: str, variant: str, streaming: bool) -> Fragment:
        """Rebind `req` to the Request the handler expects."""
        rt = self.rt
        fragment = self._open_envelope("req", enum_name, variant)
        if streaming:
            return fragment.add(f"req = {rt}.Request.from_parts(metadata, extensions, message_stream)")
        # stream errors propagate untouched here; only the client side merges metadata
        return (
            fragment
            .add("message = await message_stream.try_next()")
            .add("if message is None:")
            .add(self._internal(MISSING_REQUEST), 1)
            .extend(self._merge_trailers())
            .add(f"req = {rt}.Request.from_parts(metadata, extensions, message)")
        )

    def server_response(self, enum_name: str, variant: str, streaming: bool) -> Fragment:
        """Wrap the handler's `resp` into the outbound envelope and return it."""
        rt = self.rt
        if streaming:
            return Fragment().add(
                f"return resp.map(lambda s: {enum_name}({enum_name}.Variant.{variant}, s))"
            )
        return Fragment().add(
            f"return resp.map(lambda m: {enum_name}({enum_name}.Variant.{variant}, {rt}.once(m)))"
        )
