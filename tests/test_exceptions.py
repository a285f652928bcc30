import pytest
from pydantic import ValidationError

from core.config import CodegenSettings, Settings
from core.exceptions import (
    EXIT_CODEGEN_ERROR,
    EXIT_OK,
    EXIT_SYSTEM_ERROR,
    EXIT_USAGE_ERROR,
    codegen_code_to_exit_status,
    handle_exception,
)
from domain.common.exceptions import OutputNotWritableException, VariantCollisionException
from shared.codes import CodegenCode


@pytest.mark.parametrize(
    "code, expected",
    [
        (CodegenCode.SUCCESS, EXIT_OK),
        (CodegenCode.IR_DOCUMENT_INVALID, EXIT_CODEGEN_ERROR),
        (CodegenCode.VARIANT_COLLISION, EXIT_CODEGEN_ERROR),
        (CodegenCode.OUTPUT_NOT_WRITABLE, EXIT_SYSTEM_ERROR),
        (12345, EXIT_CODEGEN_ERROR),
    ],
)
def test_codegen_code_to_exit_status(code, expected):
    assert codegen_code_to_exit_status(code) == expected


def test_handle_exception_maps_each_family():
    assert handle_exception(VariantCollisionException("Svc", "Do", ["do", "Do"])) == EXIT_CODEGEN_ERROR
    assert handle_exception(OutputNotWritableException("/x", "denied")) == EXIT_SYSTEM_ERROR
    assert handle_exception(RuntimeError("boom")) == EXIT_SYSTEM_ERROR
    with pytest.raises(ValidationError) as ei:
        CodegenSettings(runtime_module="not a module")
    assert handle_exception(ei.value) == EXIT_USAGE_ERROR


def test_settings_read_nested_env(monkeypatch):
    monkeypatch.setenv("CODEGEN__MODULE_SUFFIX", "_rpc")
    monkeypatch.setenv("GRPC__PORT", "6000")
    settings = Settings()
    assert settings.codegen.module_suffix == "_rpc"
    assert settings.grpc.port == 6000
