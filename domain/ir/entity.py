"""
IR 领域实体 - 上游前端产出的、已完成解析与类型检查的服务描述
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Tuple


class Tag(enum.Enum):
    """Tags attached to IR nodes, queried by node identity."""

    CLIENT_STREAMING = "client_streaming"
    SERVER_STREAMING = "server_streaming"


@dataclass(frozen=True, slots=True)
class File:
    id: int
    package: Tuple[str, ...] = ()

    @property
    def dotted_package(self) -> str:
        return ".".join(self.package)


@dataclass(frozen=True, slots=True)
class IrType:
    """Reference to a resolved message node."""

    def_id: int


@dataclass(frozen=True, slots=True)
class Message:
    """A message node. `module` is the Python module that defines the class."""

    def_id: int
    file_id: int
    name: str
    module: str


@dataclass(frozen=True, slots=True)
class Argument:
    name: str
    ty: IrType


@dataclass(frozen=True, slots=True)
class Method:
    def_id: int
    name: str
    args: Tuple[Argument, ...]
    ret: IrType

    @property
    def input_ty(self) -> IrType:
        # the first argument is the sole request type
        return self.args[0].ty


@dataclass(frozen=True, slots=True)
class Service:
    def_id: int
    file_id: int
    name: str
    methods: Tuple[Method, ...] = field(default_factory=tuple)


Node = Service | Method | Message
