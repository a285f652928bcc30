"""
Shared codegen error codes used across layers (Domain/Core/CLI).

This module provides a single source of truth to avoid drift between
multiple enum definitions scattered across the codebase.
"""
from enum import IntEnum


class CodegenCode(IntEnum):
    """Code generation failure codes (single source)."""

    # Success
    SUCCESS = 0

    # IR input errors (1xxxx)
    IR_ERROR = 10000
    IR_DOCUMENT_INVALID = 10001
    NODE_NOT_FOUND = 10002
    FILE_NOT_FOUND = 10003
    MALFORMED_METHOD = 10004

    # Emission errors (2xxxx)
    EMIT_ERROR = 20000
    VARIANT_COLLISION = 20001
    IDENTIFIER_COLLISION = 20002
    PATH_COLLISION = 20003
    SERVICE_NOT_FOUND = 20004

    # Output errors (3xxxx)
    OUTPUT_ERROR = 30000
    OUTPUT_NOT_WRITABLE = 30001


__all__ = ["CodegenCode"]
