"""
VisionPress - print-ready vision workbook generator

Builds goal-planning workbooks with AI-written content, checks them against
print-vendor rules and renders them to PDF.
"""

import logging
import sys
from typing import List, Optional

from .cli import build_arg_parser, run_cli
from .core.logging_config import setup_logging


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for VisionPress."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    log_file = setup_logging(
        log_level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=args.log_file,
    )

    def _log_unhandled(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger = logging.getLogger(__name__)
        logger.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
        if log_file:
            print(f"\nAn unexpected error occurred. See {log_file} for details.")
        else:
            print(f"\nAn unexpected error occurred: {exc_value}")
    sys.excepthook = _log_unhandled

    return run_cli(args)


if __name__ == "__main__":
    sys.exit(main())
