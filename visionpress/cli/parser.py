"""Argument parser for VisionPress CLI."""

import argparse

from ..core.constants import VERSION, __author__
from ..core.layout.models import Edition
from ..core.print_specs import BindingType, TrimSize


def _add_binding_argument(parser: argparse.ArgumentParser, default=None) -> None:
    parser.add_argument(
        "--binding",
        choices=[b.value for b in BindingType],
        default=default,
        help="Binding type (default: the document's own binding)" if default is None
        else f"Binding type (default: {default})"
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="visionpress",
        description="Build, validate and render print-ready vision workbooks"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}\nAuthor: {__author__}"
    )

    # Logging
    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug output on the console"
    )
    log_group.add_argument(
        "--log-file",
        dest="log_file",
        action="store_true",
        default=True,
        help="Write a rotating log file in the user log directory (default)"
    )
    log_group.add_argument(
        "--no-log-file",
        dest="log_file",
        action="store_false",
        help="Do not write a log file"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # build
    build = subparsers.add_parser(
        "build",
        help="Build a workbook from an options JSON file and render it to PDF"
    )
    build.add_argument("options", help="Path to build options JSON")
    build.add_argument("-o", "--out", required=True, help="Output PDF path")
    build.add_argument("--report", help="Also write the validation report JSON here")
    build.add_argument("--document", help="Also write the document JSON here")
    build.add_argument(
        "--pad",
        dest="pad",
        action="store_true",
        default=True,
        help="Pad with notes pages to meet binding page rules (default)"
    )
    build.add_argument(
        "--no-pad",
        dest="pad",
        action="store_false",
        help="Do not add padding pages"
    )
    build.add_argument(
        "--strict",
        action="store_true",
        help="Do not render when the document fails print validation"
    )
    build.add_argument(
        "--offline",
        action="store_true",
        help="Skip AI generation and use template content"
    )
    build.add_argument(
        "--edition",
        choices=[e.value for e in Edition],
        help="Override the edition from the options file"
    )

    # validate
    validate = subparsers.add_parser(
        "validate",
        help="Check a document JSON against print rules"
    )
    validate.add_argument("document", help="Path to document JSON")
    _add_binding_argument(validate)
    validate.add_argument(
        "--canvas",
        action="store_true",
        help="Validate images for canvas prints (stricter quality threshold)"
    )
    validate.add_argument(
        "--target-mm",
        nargs=2,
        type=float,
        metavar=("WIDTH", "HEIGHT"),
        help="Target print size in millimetres (default: the document trim size)"
    )
    validate.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON instead of messages"
    )

    # render
    render = subparsers.add_parser(
        "render",
        help="Render a document JSON to PDF"
    )
    render.add_argument("document", help="Path to document JSON")
    render.add_argument("-o", "--out", required=True, help="Output PDF path")

    # layout
    layout = subparsers.add_parser(
        "layout",
        help="Show layout metrics for a trim size"
    )
    layout.add_argument("trim", choices=[t.name for t in TrimSize], help="Trim size")
    _add_binding_argument(layout, default=BindingType.SOFTCOVER.value)
    layout.add_argument("--dpi", type=int, help="Render resolution (default: configured DPI)")

    # themes
    subparsers.add_parser(
        "themes",
        help="List cover themes and theme packs"
    )

    return parser
