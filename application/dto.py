"""
数据传输对象（DTO）- 应用层与 CLI 之间的数据传输
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DTOBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class GeneratedMethodDTO(DTOBase):
    """单个方法的生成摘要"""

    name: str
    path: str
    client_streaming: bool = False
    server_streaming: bool = False


class GeneratedUnitDTO(DTOBase):
    """一个服务对应的输出单元"""

    service: str = Field(..., description="带包名的服务全名")
    package: str = ""
    module: str = Field(..., description="生成模块名（不含 .py）")
    relative_path: str = Field(..., description="相对输出目录的文件路径")
    source: str
    methods: List[GeneratedMethodDTO] = Field(default_factory=list)


class CodegenResultDTO(DTOBase):
    """一次生成运行的结果"""

    output_dir: str
    units: List[GeneratedUnitDTO] = Field(default_factory=list)
    written: List[str] = Field(default_factory=list)

    @property
    def services(self) -> List[str]:
        return [unit.service for unit in self.units]
