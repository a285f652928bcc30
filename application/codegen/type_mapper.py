"""Type Mapper: IR type + streaming flag -> annotation for one of four call-site shapes.

`Result<X, Status>` has no spelling of its own in generated code: the
annotated function returns X and raises the runtime's Status.
"""
from __future__ import annotations

import enum

from domain.ir.entity import IrType
from .context import CodegenContext


class TypeShape(enum.Enum):
    TRAIT_INPUT = "trait_input"
    TRAIT_OUTPUT = "trait_output"
    CLIENT_INPUT = "client_input"
    CLIENT_OUTPUT = "client_output"


class TypeMapper:
    def __init__(self, cx: CodegenContext) -> None:
        self.cx = cx

    def map(self, ty: IrType, streaming: bool, shape: TypeShape) -> str:
        t = self.cx.codegen_item_ty(ty)
        rt = self.cx.rt
        if shape is TypeShape.TRAIT_INPUT:
            if streaming:
                return f"{rt}.Request[{rt}.RecvStream[{t}]]"
            return f"{rt}.Request[{t}]"
        if shape is TypeShape.TRAIT_OUTPUT:
            if streaming:
                return f"{rt}.Response[{rt}.BoxStream[{t}]]"
            return f"{rt}.Response[{t}]"
        if shape is TypeShape.CLIENT_INPUT:
            if streaming:
                return f"{rt}.IntoStreamingRequest[{t}]"
            return f"{rt}.IntoRequest[{t}]"
        if shape is TypeShape.CLIENT_OUTPUT:
            if streaming:
                return f"{rt}.Response[typing.AsyncIterator[{t}]]"
            return f"{rt}.Response[{t}]"
        raise ValueError(f"Unknown type shape: {shape!r}")

    def trait_input_ty(self, ty: IrType, streaming: bool) -> str:
        return self.map(ty, streaming, TypeShape.TRAIT_INPUT)

    def trait_output_ty(self, ty: IrType, streaming: bool) -> str:
        return self.map(ty, streaming, TypeShape.TRAIT_OUTPUT)

    def client_input_ty(self, ty: IrType, streaming: bool) -> str:
        return self.map(ty, streaming, TypeShape.CLIENT_INPUT)

    def client_output_ty(self, ty: IrType, streaming: bool) -> str:
        return self.map(ty, streaming, TypeShape.CLIENT_OUTPUT)
