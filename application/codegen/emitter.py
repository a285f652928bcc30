"""
服务代码生成器 - 按 IR 声明顺序，为每个服务产出一个自包含的 Python 模块

A unit holds, in order: the service interface, the four envelopes
({Request,Response} x {Send,Recv}), the client builder, the client and the
server dispatcher. Each method is planned independently; only the final
assembly follows declaration order.
"""
from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from domain.ir.entity import Method, Service
from domain.ir.repository import IrDatabase
from domain.common.exceptions import (
    IdentifierCollisionException,
    MalformedMethodException,
    VariantCollisionException,
)
from core.logging_config import get_logger
from . import naming
from .context import CodegenContext
from .dispatch import DispatchEntry, DispatchTable, build_table, method_path
from .envelope import EnvelopeShapeBuilder
from .type_mapper import TypeMapper
from .writer import CodeWriter, Fragment


logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class MethodPlan:
    """Everything the templates need about one method."""

    method: Method
    ident: str
    arg_ident: str
    variant: str
    path: str
    client_streaming: bool
    server_streaming: bool
    input_ty: str
    output_ty: str
    trait_input: str
    trait_output: str
    client_input: str
    client_output: str


@dataclass(frozen=True, slots=True)
class ServiceNames:
    service: str
    server: str
    client: str
    client_builder: str
    req_send: str
    req_recv: str
    resp_send: str
    resp_recv: str

    @classmethod
    def of(cls, service: Service) -> "ServiceNames":
        name = naming.type_ident(service.name)
        return cls(
            service=name,
            server=f"{name}Server",
            client=f"{name}Client",
            client_builder=f"{name}ClientBuilder",
            req_send=f"{name}RequestSend",
            req_recv=f"{name}RequestRecv",
            resp_send=f"{name}ResponseSend",
            resp_recv=f"{name}ResponseRecv",
        )

    def all(self) -> List[str]:
        return [
            self.service,
            self.req_send,
            self.req_recv,
            self.resp_send,
            self.resp_recv,
            self.client_builder,
            self.client,
            self.server,
        ]


@dataclass(frozen=True, slots=True)
class EmittedService:
    service: Service
    package: str
    full_name: str
    module_name: str
    source: str
    plans: Tuple[MethodPlan, ...] = ()


class ServiceEmitter:
    """Emits one Python module per IR service."""

    def __init__(
        self,
        db: IrDatabase,
        *,
        runtime_module: str = "forge_rpc",
        header: str = "",
        module_suffix: str = "_forge",
        indent_width: int = 4,
    ) -> None:
        self.db = db
        self.runtime_module = runtime_module
        self.header = header
        self.module_suffix = module_suffix
        self.indent_width = indent_width

    def module_name(self, service: Service) -> str:
        return naming.to_snake_case(service.name) + self.module_suffix

    # Planning

    def _plan_method(
        self, cx: CodegenContext, mapper: TypeMapper, service: Service, package: str, method: Method
    ) -> MethodPlan:
        if len(method.args) != 1:
            raise MalformedMethodException(
                service.name, method.name, f"expected exactly one argument, got {len(method.args)}"
            )
        client_streaming = cx.client_streaming(method)
        server_streaming = cx.server_streaming(method)
        return MethodPlan(
            method=method,
            ident=naming.method_ident(method.name),
            arg_ident=naming.arg_ident(method.args[0].name),
            variant=naming.variant_ident(method.name),
            path=method_path(package, service.name, method.name),
            client_streaming=client_streaming,
            server_streaming=server_streaming,
            input_ty=cx.codegen_item_ty(method.input_ty),
            output_ty=cx.codegen_item_ty(method.ret),
            trait_input=mapper.trait_input_ty(method.input_ty, client_streaming),
            trait_output=mapper.trait_output_ty(method.ret, server_streaming),
            client_input=mapper.client_input_ty(method.input_ty, client_streaming),
            client_output=mapper.client_output_ty(method.ret, server_streaming),
        )

    def _check_unique(self, service: Service, plans: Sequence[MethodPlan]) -> None:
        variants: Dict[str, List[str]] = defaultdict(list)
        idents: Dict[str, List[str]] = defaultdict(list)
        for plan in plans:
            variants[plan.variant].append(plan.method.name)
            idents[plan.ident].append(plan.method.name)
        for variant, methods in variants.items():
            if len(methods) > 1:
                raise VariantCollisionException(service.name, variant, methods)
        for ident, methods in idents.items():
            if len(methods) > 1:
                raise IdentifierCollisionException(service.name, ident, methods)

    # Emission

    def emit(self, service: Service) -> EmittedService:
        names = ServiceNames.of(service)
        cx = CodegenContext(self.db, self.runtime_module, names.all())
        mapper = TypeMapper(cx)
        envelopes = EnvelopeShapeBuilder(cx.rt)
        package = cx.package(service)
        full_name = f"{package}.{service.name}" if package else service.name

        plans = [self._plan_method(cx, mapper, service, package, method) for method in service.methods]
        self._check_unique(service, plans)
        table = build_table(package, service.name, [(plan.method, plan.variant) for plan in plans])
        by_path = {plan.path: plan for plan in plans}

        body = CodeWriter(self.indent_width)
        body.line(f"SERVICE_NAME = {json.dumps(full_name)}")
        body.blank(2)
        self._emit_trait(body, names, full_name, plans)
        self._emit_send_envelope(body, names.req_send, "Request", full_name, plans, cx.rt)
        self._emit_recv_envelope(body, names.req_recv, "Request", full_name, plans, table, cx.rt,
                                 lambda entry: by_path[entry.path].input_ty)
        self._emit_send_envelope(body, names.resp_send, "Response", full_name, plans, cx.rt)
        self._emit_recv_envelope(body, names.resp_recv, "Response", full_name, plans, table, cx.rt,
                                 lambda entry: by_path[entry.path].output_ty)
        self._emit_client_builder(body, names, cx.rt)
        self._emit_client(body, names, plans, envelopes, cx.rt)
        self._emit_server(body, names, table, by_path, envelopes, cx.rt)

        source = self._assemble(cx, names, full_name, body.render())
        logger.info(
            "codegen_service_emitted",
            service=full_name,
            methods=len(plans),
            module=self.module_name(service),
        )
        return EmittedService(
            service=service,
            package=package,
            full_name=full_name,
            module_name=self.module_name(service),
            source=source,
            plans=tuple(plans),
        )

    def _assemble(self, cx: CodegenContext, names: ServiceNames, full_name: str, body: str) -> str:
        out = CodeWriter(self.indent_width)
        for header_line in self.header.splitlines():
            out.line(f"# {header_line}" if header_line else "#")
        out.line(f"# source: {full_name}")
        out.line(f'"""gRPC stubs for {full_name}."""')
        out.line("from __future__ import annotations")
        out.blank()
        for line in cx.imports.render():
            out.line(line)
        out.blank(2)
        out.line("__all__ = [")
        with out.indent():
            for name in ["SERVICE_NAME", *names.all()]:
                out.line(f"{json.dumps(name)},")
        out.line("]")
        # render() drops trailing blanks, so the separator is added here
        return out.render() + "\n\n" + body

    def _emit_trait(self, w: CodeWriter, names: ServiceNames, full_name: str, plans: Sequence[MethodPlan]) -> None:
        with w.block(f"class {names.service}(abc.ABC):"):
            w.line(f'"""Service interface for {full_name}; implement it and serve it with {names.server}."""')
            for plan in plans:
                w.blank()
                w.line("@abc.abstractmethod")
                with w.block(
                    f"async def {plan.ident}(self, {plan.arg_ident}: {plan.trait_input}) -> {plan.trait_output}:"
                ):
                    w.line("...")
        w.blank(2)

    def _emit_variants(self, w: CodeWriter, plans: Sequence[MethodPlan]) -> None:
        with w.block("class Variant(enum.Enum):"):
            if not plans:
                w.line("pass")
            for plan in plans:
                w.line(f"{plan.variant} = {json.dumps(plan.method.name)}")

    def _emit_send_envelope(
        self,
        w: CodeWriter,
        enum_name: str,
        direction: str,
        full_name: str,
        plans: Sequence[MethodPlan],
        rt: str,
    ) -> None:
        with w.block(f"class {enum_name}({rt}.SendEntryMessage):"):
            w.line(f'"""Outbound {direction.lower()} envelope of {full_name}."""')
            w.blank()
            self._emit_variants(w, plans)
        w.blank(2)

    def _emit_recv_envelope(
        self,
        w: CodeWriter,
        enum_name: str,
        direction: str,
        full_name: str,
        plans: Sequence[MethodPlan],
        table: DispatchTable,
        rt: str,
        message_type_of,
    ) -> None:
        with w.block(f"class {enum_name}({rt}.RecvEntryMessage):"):
            w.line(f'"""Inbound {direction.lower()} envelope of {full_name}."""')
            w.blank()
            self._emit_variants(w, plans)
            w.blank()
            w.line("@classmethod")
            with w.block(
                f"def from_body(cls, method: typing.Optional[str], body: {rt}.Body, kind: {rt}.Kind) -> {enum_name}:"
            ):
                w.fragment(table.decode_arms(rt, message_type_of))
        w.blank(2)

    def _emit_client_builder(self, w: CodeWriter, names: ServiceNames, rt: str) -> None:
        with w.block(f"class {names.client_builder}:"):
            w.line("@staticmethod")
            with w.block(f"def new(service_name: str = SERVICE_NAME) -> {rt}.ClientBuilder[{names.client}]:"):
                w.line(f"return {rt}.ClientBuilder({names.client}(), service_name, {names.resp_recv})")
        w.blank(2)

    def _emit_client(
        self,
        w: CodeWriter,
        names: ServiceNames,
        plans: Sequence[MethodPlan],
        envelopes: EnvelopeShapeBuilder,
        rt: str,
    ) -> None:
        with w.block(f"class {names.client}({rt}.SetClient):"):
            with w.block(f"def with_callopt(self, callopt: {rt}.CallOpt) -> {names.client}:"):
                w.line("self.require_client().set_callopt(callopt)")
                w.line("return self")
            for plan in plans:
                w.blank()
                with w.block(f"async def {plan.ident}(self, requests: {plan.client_input}) -> {plan.client_output}:"):
                    w.fragment(envelopes.client_request(plan.client_streaming))
                    w.line(
                        f"req = req.map(lambda message: "
                        f"{names.req_send}({names.req_send}.Variant.{plan.variant}, message))"
                    )
                    w.line(f"resp = await self.require_client().call({json.dumps(plan.path)}, req)")
                    w.fragment(envelopes.client_response(names.resp_recv, plan.variant, plan.server_streaming))
        w.blank(2)

    def _server_arm(
        self, names: ServiceNames, plan: MethodPlan, envelopes: EnvelopeShapeBuilder
    ) -> Fragment:
        return (
            Fragment()
            .extend(envelopes.server_request(names.req_recv, plan.variant, plan.client_streaming))
            .add(f"resp = await inner.{plan.ident}(req)")
            .extend(envelopes.server_response(names.resp_send, plan.variant, plan.server_streaming))
        )

    def _emit_server(
        self,
        w: CodeWriter,
        names: ServiceNames,
        table: DispatchTable,
        by_path: Dict[str, MethodPlan],
        envelopes: EnvelopeShapeBuilder,
        rt: str,
    ) -> None:
        def arm_of(entry: DispatchEntry) -> Fragment:
            return self._server_arm(names, by_path[entry.path], envelopes)

        with w.block(f"class {names.server}({rt}.Service):"):
            with w.block(f"def __init__(self, inner: {names.service}) -> None:"):
                w.line("self.inner = inner")
            w.blank()
            w.line("@classmethod")
            with w.block(f"def new(cls, inner: {names.service}) -> {rt}.Server:"):
                w.line(f"return {rt}.Server(cls(inner), {names.req_recv}, SERVICE_NAME)")
            w.blank()
            with w.block(
                f"async def call(self, cx: {rt}.ServerContext, req: {rt}.Request[{names.req_recv}]) "
                f"-> {rt}.Response[{names.resp_send}]:"
            ):
                w.line("inner = self.inner")
                w.line("path = cx.rpc_info.method")
                w.fragment(table.route_arms(rt, arm_of))
