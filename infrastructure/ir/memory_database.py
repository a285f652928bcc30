"""
IR 数据库的内存实现
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Set, Tuple

from domain.ir.entity import Argument, File, IrType, Message, Method, Node, Service, Tag
from domain.ir.repository import IrDatabase
from domain.common.exceptions import FileNotFoundInIrException, NodeNotFoundException
from core.logging_config import get_logger


logger = get_logger(__name__)


class InMemoryIrDatabase(IrDatabase):
    """Dict-backed IR database. Ids are assigned in insertion order."""

    def __init__(self) -> None:
        self._nodes: Dict[int, Node] = {}
        self._files: Dict[int, File] = {}
        self._tags: Dict[int, Set[Tag]] = {}
        self._service_ids: List[int] = []
        self._messages_by_ref: Dict[Tuple[str, str], int] = {}
        self._next_id = 0

    def _new_id(self) -> int:
        def_id = self._next_id
        self._next_id += 1
        return def_id

    # Queries

    def services(self) -> List[Service]:
        return [self._nodes[def_id] for def_id in self._service_ids]  # type: ignore[misc]

    def node(self, def_id: int) -> Node:
        try:
            return self._nodes[def_id]
        except KeyError:
            raise NodeNotFoundException(def_id) from None

    def file(self, file_id: int) -> File:
        try:
            return self._files[file_id]
        except KeyError:
            raise FileNotFoundInIrException(file_id) from None

    def node_contains_tag(self, def_id: int, tag: Tag) -> bool:
        return tag in self._tags.get(def_id, ())

    # Construction, used by loaders and tests

    def add_file(self, package: Sequence[str] | str = ()) -> File:
        if isinstance(package, str):
            package = tuple(p for p in package.split(".") if p)
        file = File(id=len(self._files), package=tuple(package))
        self._files[file.id] = file
        return file

    def add_message(self, file: File, name: str, module: str) -> IrType:
        """Register a message node; the same (module, name) always yields the same node."""
        key = (module, name)
        if key in self._messages_by_ref:
            return IrType(self._messages_by_ref[key])
        message = Message(def_id=self._new_id(), file_id=file.id, name=name, module=module)
        self._nodes[message.def_id] = message
        self._messages_by_ref[key] = message.def_id
        return IrType(message.def_id)

    def add_method(
        self,
        name: str,
        input_ty: IrType,
        output_ty: IrType,
        *,
        client_streaming: bool = False,
        server_streaming: bool = False,
        arg_name: str = "req",
    ) -> Method:
        method = Method(
            def_id=self._new_id(),
            name=name,
            args=(Argument(name=arg_name, ty=input_ty),),
            ret=output_ty,
        )
        self._nodes[method.def_id] = method
        tags: Set[Tag] = set()
        if client_streaming:
            tags.add(Tag.CLIENT_STREAMING)
        if server_streaming:
            tags.add(Tag.SERVER_STREAMING)
        self._tags[method.def_id] = tags
        return method

    def add_service(self, file: File, name: str, methods: Iterable[Method] = ()) -> Service:
        service = Service(def_id=self._new_id(), file_id=file.id, name=name, methods=tuple(methods))
        self._nodes[service.def_id] = service
        self._service_ids.append(service.def_id)
        logger.debug(
            "ir_service_registered",
            service=name,
            package=file.dotted_package,
            methods=len(service.methods),
        )
        return service
