"""stub-forge command line: generate gRPC stub modules from a JSON IR document.

Exit status: 0 on success, 1 for IR/emission errors, 2 for invalid usage or
configuration, 3 when output cannot be written.
"""
from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from application.services.codegen_service import CodegenApplicationService
from core.config import settings
from core.exceptions import EXIT_OK, handle_exception
from core.logging_config import configure_logging, get_logger
from infrastructure.ir.json_loader import load_ir


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stub-forge", description=__doc__.splitlines()[0])
    parser.add_argument("ir", help="path to the JSON IR document")
    parser.add_argument("--out", default=None, help=f"output directory (default: {settings.codegen.output_dir})")
    parser.add_argument("--service", default=None, help="only generate this service (name or package.Name)")
    parser.add_argument("--stdout", action="store_true", help="print generated sources instead of writing files")
    parser.add_argument("--debug", action="store_true", help="console logging at DEBUG level")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        configure_logging(debug=True)

    try:
        db = load_ir(args.ir)
        service = CodegenApplicationService(db)
        if args.stdout:
            for unit in service.generate(args.service):
                sys.stdout.write(unit.source)
            return EXIT_OK
        result = service.run(args.service, args.out)
        logger.info(
            "codegen_finished",
            output_dir=result.output_dir,
            services=result.services,
            files=len(result.written),
        )
        return EXIT_OK
    except Exception as exc:
        return handle_exception(exc)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
