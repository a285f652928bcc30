"""
JSON IR document loader.

The document is produced by the IDL front-end after resolution, so every type
reference already names the Python module defining the message class:

    {"files": [{"package": "helloworld",
                "services": [{"name": "Greeter",
                              "methods": [{"name": "SayHello",
                                           "input": {"module": "hello_pb2", "name": "HelloRequest"},
                                           "output": {"module": "hello_pb2", "name": "HelloReply"}}]}]}]}
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from domain.common.exceptions import IrDocumentException
from infrastructure.ir.memory_database import InMemoryIrDatabase
from core.logging_config import get_logger


logger = get_logger(__name__)


class TypeRefDoc(BaseModel):
    module: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class MethodDoc(BaseModel):
    name: str = Field(..., min_length=1)
    input: TypeRefDoc
    output: TypeRefDoc
    client_streaming: bool = False
    server_streaming: bool = False
    arg_name: str = "req"


class ServiceDoc(BaseModel):
    name: str = Field(..., min_length=1)
    methods: List[MethodDoc] = Field(default_factory=list)


class FileDoc(BaseModel):
    package: List[str] = Field(default_factory=list)
    services: List[ServiceDoc] = Field(default_factory=list)

    @field_validator("package", mode="before")
    @classmethod
    def _split_package(cls, v):
        """允许 "a.b.c" 字符串或 ["a", "b", "c"] 列表两种格式。"""
        if isinstance(v, str):
            return [part for part in v.split(".") if part]
        return v


class IrDocument(BaseModel):
    files: List[FileDoc] = Field(default_factory=list)


def build_database(document: IrDocument) -> InMemoryIrDatabase:
    db = InMemoryIrDatabase()
    for file_doc in document.files:
        file = db.add_file(file_doc.package)
        for service_doc in file_doc.services:
            methods = []
            for method_doc in service_doc.methods:
                input_ty = db.add_message(file, method_doc.input.name, method_doc.input.module)
                output_ty = db.add_message(file, method_doc.output.name, method_doc.output.module)
                methods.append(
                    db.add_method(
                        method_doc.name,
                        input_ty,
                        output_ty,
                        client_streaming=method_doc.client_streaming,
                        server_streaming=method_doc.server_streaming,
                        arg_name=method_doc.arg_name,
                    )
                )
            db.add_service(file, service_doc.name, methods)
    return db


def load_ir(source: Union[str, Path]) -> InMemoryIrDatabase:
    """Load a JSON IR document from a path."""
    path = Path(source)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise IrDocumentException(f"Cannot read IR document {path}: {exc}", details={"path": str(path)}) from exc
    db = loads_ir(text, origin=str(path))
    logger.info("ir_loaded", path=str(path), services=len(db.services()))
    return db


def loads_ir(text: str, *, origin: str = "<string>") -> InMemoryIrDatabase:
    try:
        document = IrDocument.model_validate_json(text)
    except ValidationError as exc:
        raise IrDocumentException(
            f"Invalid IR document {origin}",
            details={"origin": origin, "errors": exc.errors(include_url=False)},
        ) from exc
    return build_database(document)
