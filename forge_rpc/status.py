from __future__ import annotations

from typing import Optional

import grpc

from .metadata import Metadata


Code = grpc.StatusCode


class Status(Exception):
    """An RPC failure: a gRPC status code, a message and the metadata that goes with it."""

    def __init__(self, code: Code, message: str = "", metadata: Optional[Metadata] = None) -> None:
        self.code = code
        self.message = message
        self.metadata = metadata if metadata is not None else Metadata()
        super().__init__(message)

    @classmethod
    def new(cls, code: Code, message: str) -> "Status":
        return cls(code, message)

    @classmethod
    def unimplemented(cls, message: str) -> "Status":
        return cls(Code.UNIMPLEMENTED, message)

    @classmethod
    def internal(cls, message: str) -> "Status":
        return cls(Code.INTERNAL, message)

    @classmethod
    def from_rpc_error(cls, exc: grpc.RpcError) -> "Status":
        """Convert a grpc call error (code/details/trailing metadata) into a Status."""
        code = exc.code() if callable(getattr(exc, "code", None)) else Code.UNKNOWN
        details = exc.details() if callable(getattr(exc, "details", None)) else str(exc)
        trailing = exc.trailing_metadata() if callable(getattr(exc, "trailing_metadata", None)) else None
        return cls(code or Code.UNKNOWN, details or "", Metadata.from_grpc(trailing))

    def __repr__(self) -> str:
        return f"Status(code={self.code.name}, message={self.message!r})"

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message}"
