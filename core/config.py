"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class CodegenSettings(BaseModel):
    output_dir: str = "generated"
    # Appended to the snake_case service name to form the module name
    module_suffix: str = "_forge"
    # Importable name of the runtime the generated code calls into
    runtime_module: str = "forge_rpc"
    header: str = "Code generated by stub-forge. DO NOT EDIT."
    indent_width: int = 4

    @field_validator("runtime_module")
    @classmethod
    def _validate_runtime_module(cls, v: str) -> str:
        parts = v.split(".")
        if not all(part.isidentifier() for part in parts):
            raise ValueError(f"runtime_module must be a dotted module path, got {v!r}")
        return v


class GrpcSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 50051
    # Default client target when a builder is not given an address
    target: str = "localhost:50051"
    # This maps to GRPC option grpc.max_concurrent_streams
    max_concurrent_streams: int = 100
    # Default per-call deadline in seconds, None means no deadline
    timeout: Optional[float] = None


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = "stub-forge"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    codegen: CodegenSettings = Field(default_factory=CodegenSettings)

    # gRPC runtime settings
    grpc: GrpcSettings = Field(default_factory=GrpcSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
