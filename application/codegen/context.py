"""
生成上下文 - 每个输出单元一个，负责类型解析与 import 收集
"""
from __future__ import annotations

from typing import Dict, Iterable, List

from domain.ir.entity import IrType, Method, Service
from domain.ir.repository import IrDatabase


STDLIB_IMPORTS = ("abc", "enum", "typing")

# Parameters and locals of generated functions. A module alias spelled like one
# of them would be shadowed inside the function that needs it.
GENERATED_LOCALS = (
    "self", "cls", "method", "body", "kind", "requests", "req", "resp", "cx",
    "inner", "path", "metadata", "extensions", "envelope", "message_stream",
    "message", "trailers", "status", "callopt", "service_name", "m", "s",
    "SERVICE_NAME", "annotations",
)


class ImportRegistry:
    """Imports of one generated module, each module bound to a unique local alias."""

    def __init__(self, reserved: tuple[str, ...] = ()) -> None:
        self._aliases: Dict[str, str] = {}
        self._taken: set[str] = set(STDLIB_IMPORTS) | set(reserved)

    def require(self, module: str) -> str:
        """Local name bound to `module` in the generated code."""
        if module in self._aliases:
            return self._aliases[module]
        alias = module.rsplit(".", 1)[-1]
        if alias in self._taken:
            alias = module.replace(".", "_") + "_"
        self._aliases[module] = alias
        self._taken.add(alias)
        return alias

    def render(self) -> List[str]:
        lines = [f"import {name}" for name in STDLIB_IMPORTS]
        lines.append("")
        for module in sorted(self._aliases):
            alias = self._aliases[module]
            package, _, leaf = module.rpartition(".")
            if not package:
                lines.append(f"import {module}" if leaf == alias else f"import {module} as {alias}")
            elif leaf == alias:
                lines.append(f"from {package} import {leaf}")
            else:
                lines.append(f"from {package} import {leaf} as {alias}")
        return lines


class CodegenContext:
    """Read-only IR queries plus the import bookkeeping of the unit being emitted."""

    def __init__(self, db: IrDatabase, runtime_module: str, reserved: Iterable[str] = ()) -> None:
        self.db = db
        # reserved: module-level names of the unit (its generated classes)
        self.imports = ImportRegistry(GENERATED_LOCALS + tuple(reserved))
        self.rt = self.imports.require(runtime_module)

    def codegen_item_ty(self, ty: IrType) -> str:
        message = self.db.message(ty.def_id)
        alias = self.imports.require(message.module)
        return f"{alias}.{message.name}"

    def client_streaming(self, method: Method) -> bool:
        return self.db.is_client_streaming(method)

    def server_streaming(self, method: Method) -> bool:
        return self.db.is_server_streaming(method)

    def package(self, service: Service) -> str:
        return self.db.package_of(service)
