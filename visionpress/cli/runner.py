"""CLI runner for VisionPress."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict

from ..core.ai_content import AIContentGenerator
from ..core.config import ConfigManager, WorkbookConfig
from ..core.errors import MalformedPageError, WorkbookError
from ..core.layout.engine import WorkbookRenderer
from ..core.layout.models import Document
from ..core.logging_config import ErrorLogger
from ..core.print_specs import BindingType, TrimSize, resolve_layout
from ..core.sequence import BuildOptions, PageSequenceBuilder
from ..core.validation import PrintValidator, ProductKind, ensure_printable, pad_document
from ..providers import OfflineProvider

logger = logging.getLogger(__name__)


def load_json(path: str) -> Dict[str, Any]:
    """Read a JSON object from a file."""
    fp = Path(path).expanduser()
    return json.loads(fp.read_text(encoding="utf-8"))


def write_json(path: str, data: Any) -> Path:
    fp = Path(path).expanduser()
    fp.parent.mkdir(parents=True, exist_ok=True)
    fp.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return fp


def load_workbook_config() -> WorkbookConfig:
    """Workbook settings from the user's config file."""
    return WorkbookConfig.from_config_manager(ConfigManager())


async def build_workbook(args, config: WorkbookConfig) -> int:
    options_data = load_json(args.options)
    if args.edition:
        options_data["edition"] = args.edition
    options = BuildOptions.from_dict(options_data)

    generator = None
    if args.offline:
        generator = AIContentGenerator(config, provider=OfflineProvider({}))
    builder = PageSequenceBuilder(config, generator=generator)

    print(f"Building {options.edition.value} workbook...")
    document = await builder.build(options)

    validator = PrintValidator(config)
    report = await validator.validate(document)
    if args.pad and report.padding_needed:
        added = pad_document(document, report)
        print(f"Added {added} notes page(s) to meet binding rules")
        report = await validator.validate(document)

    for message in report.to_messages():
        print(message)
    if args.report:
        print(f"Saved report to {write_json(args.report, report.to_dict())}")
    if args.document:
        print(f"Saved document to {write_json(args.document, document.to_dict())}")
    if args.strict:
        ensure_printable(report)

    out_path = Path(args.out).expanduser().resolve()
    with ErrorLogger("PDF rendering", logger):
        result = await WorkbookRenderer(config).render_to_file(document, out_path)
    print(f"Saved PDF to {out_path} ({result.page_count} pages)")
    if result.missing_assets:
        print(f"Warning: {len(result.missing_assets)} image(s) could not be loaded and were replaced "
              f"with placeholders")
    return 0 if report.is_valid else 1


async def validate_document(args, config: WorkbookConfig) -> int:
    document = Document.from_dict(load_json(args.document))
    binding = BindingType.parse(args.binding) if args.binding else None
    product = ProductKind.CANVAS if args.canvas else ProductKind.PAPER
    target = tuple(args.target_mm) if args.target_mm else None

    report = await PrintValidator(config).validate(
        document, target_print_dimensions_mm=target, binding_type=binding, product=product
    )
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        for message in report.to_messages():
            print(message)
    return 0 if report.is_valid else 1


async def render_document(args, config: WorkbookConfig) -> int:
    document = Document.from_dict(load_json(args.document))
    out_path = Path(args.out).expanduser().resolve()
    result = await WorkbookRenderer(config).render_to_file(document, out_path)
    print(f"Saved PDF to {out_path} ({result.page_count} pages)")
    if result.padding_discrepancy:
        print("Warning: document had an odd page count; a blank page was appended")
    return 0


def show_layout(args, config: WorkbookConfig) -> int:
    layout = resolve_layout(TrimSize.parse(args.trim), BindingType.parse(args.binding),
                            args.dpi or config.dpi)
    print(json.dumps(layout.to_dict(), indent=2))
    return 0


def list_themes(config: WorkbookConfig) -> int:
    print("Cover themes:")
    for theme in config.cover_themes.values():
        print(f"  {theme.id:<24} {theme.name} - {theme.description}")
    print("\nTheme packs:")
    for pack in config.theme_packs.values():
        print(f"  {pack.id:<24} {pack.name}")
    return 0


def run_cli(args) -> int:
    """
    Run CLI with parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for a document that fails print
        validation, 2 for bad input, 3 for workbook errors, 4 for
        unexpected failures)
    """
    command = getattr(args, "command", None)
    if not command:
        print("Nothing to do. Use one of: build, validate, render, layout, themes.")
        print("Use -h/--help for more options.")
        return 2

    config = load_workbook_config()

    try:
        if command == "build":
            return asyncio.run(build_workbook(args, config))
        if command == "validate":
            return asyncio.run(validate_document(args, config))
        if command == "render":
            return asyncio.run(render_document(args, config))
        if command == "layout":
            return show_layout(args, config)
        if command == "themes":
            return list_themes(config)
    except FileNotFoundError as e:
        print(f"File not found: {e.filename}")
        return 2
    except (json.JSONDecodeError, ValueError, KeyError) as e:
        logger.debug("Bad input", exc_info=True)
        print(f"Invalid input: {e}")
        return 2
    except MalformedPageError as e:
        print(f"Malformed document: {e}")
        return 3
    except WorkbookError as e:
        logger.error(f"{command} failed: {e}")
        print(f"Error: {e}")
        return 3
    except Exception as e:
        logger.exception(f"Unexpected error during {command}")
        print(f"{command} failed: {e}")
        return 4

    print(f"Unknown command: {command}")
    return 2
