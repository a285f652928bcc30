"""
代码生成应用服务 - 编排 IR 读取、服务代码生成与文件落盘
"""
import os
from pathlib import Path
from typing import List, Optional, Tuple

from application.codegen.emitter import EmittedService, ServiceEmitter
from application.dto import CodegenResultDTO, GeneratedMethodDTO, GeneratedUnitDTO
from core.config import CodegenSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import OutputNotWritableException, ServiceNotFoundException
from domain.ir.entity import Service
from domain.ir.repository import IrDatabase


logger = get_logger(__name__)


class CodegenApplicationService:
    """
    代码生成服务

    1. 按 IR 声明顺序为每个服务生成一个模块
    2. 任一服务生成失败则整次运行失败，不写出任何文件
    3. 输出路径为 output_dir/<包名各段>/<模块名>.py
    """

    def __init__(self, db: IrDatabase, config: Optional[CodegenSettings] = None):
        self._db = db
        self._config = config or settings.codegen
        self._emitter = ServiceEmitter(
            db,
            runtime_module=self._config.runtime_module,
            header=self._config.header,
            module_suffix=self._config.module_suffix,
            indent_width=self._config.indent_width,
        )

    def _select(self, service_name: Optional[str]) -> List[Service]:
        services = self._db.services()
        if service_name is None:
            return services
        selected = []
        for s in services:
            package = self._db.package_of(s)
            full_name = f"{package}.{s.name}" if package else s.name
            if service_name in (s.name, full_name):
                selected.append(s)
        if not selected:
            raise ServiceNotFoundException(service_name)
        return selected

    def _to_unit(self, emitted: EmittedService) -> GeneratedUnitDTO:
        parts = [p for p in emitted.package.split(".") if p]
        relative = Path(*parts, f"{emitted.module_name}.py") if parts else Path(f"{emitted.module_name}.py")
        return GeneratedUnitDTO(
            service=emitted.full_name,
            package=emitted.package,
            module=emitted.module_name,
            relative_path=relative.as_posix(),
            source=emitted.source,
            methods=[
                GeneratedMethodDTO(
                    name=plan.method.name,
                    path=plan.path,
                    client_streaming=plan.client_streaming,
                    server_streaming=plan.server_streaming,
                )
                for plan in emitted.plans
            ],
        )

    def generate(self, service_name: Optional[str] = None) -> List[GeneratedUnitDTO]:
        """生成全部（或指定）服务的源码，不落盘"""
        units = [self._to_unit(self._emitter.emit(service)) for service in self._select(service_name)]
        logger.info("codegen_completed", services=len(units))
        return units

    def write(self, units: List[GeneratedUnitDTO], output_dir: Optional[str] = None) -> CodegenResultDTO:
        """
        把生成结果写入输出目录

        先把每个单元写成同目录下的临时文件，全部成功后再逐个替换到位；
        任一单元失败时删除临时文件和本次新建的目录，输出目录保持原样。
        """
        root = Path(output_dir or self._config.output_dir)
        staged: List[Tuple[Path, Path]] = []
        created_dirs: List[Path] = []
        try:
            for unit in units:
                target = root / unit.relative_path
                staging = target.with_name(f".{target.name}.tmp")
                try:
                    created_dirs.extend(self._make_parents(target.parent))
                    staging.write_text(unit.source, encoding="utf-8")
                except OSError as exc:
                    raise OutputNotWritableException(str(target), str(exc)) from exc
                staged.append((staging, target))
        except OutputNotWritableException:
            self._discard(staged, created_dirs)
            raise

        written: List[str] = []
        for (staging, target), unit in zip(staged, units):
            try:
                os.replace(staging, target)
            except OSError as exc:
                raise OutputNotWritableException(str(target), str(exc)) from exc
            written.append(str(target))
            logger.info("codegen_unit_written", service=unit.service, path=str(target))
        return CodegenResultDTO(output_dir=str(root), units=units, written=written)

    @staticmethod
    def _make_parents(directory: Path) -> List[Path]:
        """mkdir -p，返回本次新建的目录（由浅到深）"""
        missing: List[Path] = []
        current = directory
        while not current.exists():
            missing.append(current)
            if current.parent == current:
                break
            current = current.parent
        directory.mkdir(parents=True, exist_ok=True)
        return list(reversed(missing))

    @staticmethod
    def _discard(staged: List[Tuple[Path, Path]], created_dirs: List[Path]) -> None:
        for staging, _ in staged:
            staging.unlink(missing_ok=True)
        for directory in reversed(created_dirs):
            try:
                directory.rmdir()
            except OSError:
                logger.warning("codegen_cleanup_skipped", path=str(directory))
        logger.info("codegen_output_discarded", files=len(staged))

    def run(self, service_name: Optional[str] = None, output_dir: Optional[str] = None) -> CodegenResultDTO:
        # generate() finishes every unit before anything is written
        return self.write(self.generate(service_name), output_dir)
