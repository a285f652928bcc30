"""
IR 数据库接口 - 生成器只读查询的协作者抽象
"""
from abc import ABC, abstractmethod
from typing import List

from .entity import File, Message, Method, Node, Service, Tag
from domain.common.exceptions import UnexpectedNodeKindException


class IrDatabase(ABC):
    """Read-only view over a finalized IR. Lookups of unknown ids raise."""

    @abstractmethod
    def services(self) -> List[Service]:
        """All services in declaration order"""

    @abstractmethod
    def node(self, def_id: int) -> Node:
        """Node by identity, raises NodeNotFoundException"""

    @abstractmethod
    def file(self, file_id: int) -> File:
        """File by id, raises FileNotFoundInIrException"""

    @abstractmethod
    def node_contains_tag(self, def_id: int, tag: Tag) -> bool:
        """Whether the node carries the tag"""

    def message(self, def_id: int) -> Message:
        node = self.node(def_id)
        if not isinstance(node, Message):
            raise UnexpectedNodeKindException(def_id, "Message", type(node).__name__)
        return node

    def is_client_streaming(self, method: Method) -> bool:
        return self.node_contains_tag(method.def_id, Tag.CLIENT_STREAMING)

    def is_server_streaming(self, method: Method) -> bool:
        return self.node_contains_tag(method.def_id, Tag.SERVER_STREAMING)

    def package_of(self, service: Service) -> str:
        return self.file(service.file_id).dotted_package
