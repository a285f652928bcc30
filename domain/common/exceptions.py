"""Domain-level codegen exceptions, shared by the domain, application and infrastructure layers.

The core layer only maps these to exit codes and logs; it never raises them.
All of them are fatal for a generation run.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import CodegenCode


class CodegenException(Exception):
    """Base class for generation-time failures."""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "CodegenError",
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class NodeNotFoundException(CodegenException):
    def __init__(self, def_id: int):
        super().__init__(
            code=CodegenCode.NODE_NOT_FOUND,
            message=f"IR node {def_id} not found",
            error_type="NodeNotFound",
            details={"def_id": def_id},
        )


class FileNotFoundInIrException(CodegenException):
    def __init__(self, file_id: int):
        super().__init__(
            code=CodegenCode.FILE_NOT_FOUND,
            message=f"IR file {file_id} not found",
            error_type="FileNotFound",
            details={"file_id": file_id},
        )


class UnexpectedNodeKindException(CodegenException):
    def __init__(self, def_id: int, expected: str, actual: str):
        super().__init__(
            code=CodegenCode.IR_ERROR,
            message=f"IR node {def_id} is a {actual}, expected a {expected}",
            error_type="UnexpectedNodeKind",
            details={"def_id": def_id, "expected": expected, "actual": actual},
        )


class MalformedMethodException(CodegenException):
    def __init__(self, service: str, method: str, reason: str):
        super().__init__(
            code=CodegenCode.MALFORMED_METHOD,
            message=f"Method {service}.{method} is malformed: {reason}",
            error_type="MalformedMethod",
            details={"service": service, "method": method, "reason": reason},
        )


class IrDocumentException(CodegenException):
    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(
            code=CodegenCode.IR_DOCUMENT_INVALID,
            message=message,
            error_type="IrDocumentInvalid",
            details=details,
        )


class VariantCollisionException(CodegenException):
    """Two methods of one service map onto the same envelope variant."""

    def __init__(self, service: str, variant: str, methods: list[str]):
        super().__init__(
            code=CodegenCode.VARIANT_COLLISION,
            message=f"Methods {', '.join(methods)} of {service} collapse to envelope variant {variant}",
            error_type="VariantCollision",
            details={"service": service, "variant": variant, "methods": methods},
        )


class IdentifierCollisionException(CodegenException):
    def __init__(self, service: str, identifier: str, methods: list[str]):
        super().__init__(
            code=CodegenCode.IDENTIFIER_COLLISION,
            message=f"Methods {', '.join(methods)} of {service} collapse to identifier {identifier}",
            error_type="IdentifierCollision",
            details={"service": service, "identifier": identifier, "methods": methods},
        )


class PathCollisionException(CodegenException):
    def __init__(self, path: str):
        super().__init__(
            code=CodegenCode.PATH_COLLISION,
            message=f"Dispatch path {path} is registered twice",
            error_type="PathCollision",
            details={"path": path},
        )


class ServiceNotFoundException(CodegenException):
    def __init__(self, name: str):
        super().__init__(
            code=CodegenCode.SERVICE_NOT_FOUND,
            message=f"Service {name} not found in IR",
            error_type="ServiceNotFound",
            details={"service": name},
        )


class OutputNotWritableException(CodegenException):
    def __init__(self, path: str, reason: str):
        super().__init__(
            code=CodegenCode.OUTPUT_NOT_WRITABLE,
            message=f"Cannot write {path}: {reason}",
            error_type="OutputNotWritable",
            details={"path": path, "reason": reason},
        )
