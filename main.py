"""
Entry point: polyline segment reports from a DXF drawing.

Usage:
    python main.py <dxf_file> [--group CURVES[=LABELS]] ... [--output OUTPUT]
    python main.py <dxf_file> [--layer NAME] ... [--map OLD=NEW] ...

Examples:
    python main.py plant.dxf --group 2A,2B=3F,40 --group 51 --to-unit m -o pipes.csv
    python main.py plant.dxf --layer PIPES --map VALVE_A=Valve -o links.csv
    python main.py plant.dxf --list-layers
    python main.py plant.dxf --group 2A --config project.plreport.json

Without --group the layer connection report is written: every polyline
on the chosen layers (all polylines if none are chosen) with the blocks
at its ends.
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence, Tuple

# Unicode labels on Windows consoles
if sys.stdout.encoding and sys.stdout.encoding.lower() not in ('utf-8', 'utf8'):
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
if sys.stderr.encoding and sys.stderr.encoding.lower() not in ('utf-8', 'utf8'):
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

from polyline_report.analysis.aggregator import NoGroupsCollectedError
from polyline_report.io.dxf_reader import DxfLoadError, load_drawing
from polyline_report.logging_config import setup_logging
from polyline_report.pipeline import parse_group_argument, run_group_report, run_layer_report
from polyline_report.project_config import ProjectConfig, load_config
from polyline_report.report.csv_writer import ExportError
from polyline_report.report.units import SUPPORTED_UNITS

logger = logging.getLogger("polyline_report.cli")


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------

def _parse_mapping(text: str) -> Tuple[str, str]:
    original, sep, replacement = text.partition("=")
    if not sep or not original.strip():
        raise argparse.ArgumentTypeError(f"expected OLD=NEW, got {text!r}")
    return original.strip(), replacement.strip()


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="polyline-report",
        description="Segment length report of DXF polylines as CSV.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "dxf_file",
        help="Path to the input DXF drawing.",
    )
    parser.add_argument(
        "--group", "-g",
        action="append",
        default=[],
        metavar="CURVES[=LABELS]",
        help="One analysis group: comma-separated LWPOLYLINE handles, optionally "
             "followed by '=' and comma-separated label entity handles "
             "(TEXT, MTEXT, LEADER, MULTILEADER). Repeat for more groups.",
    )
    parser.add_argument(
        "--layer", "-l",
        action="append",
        default=[],
        dest="layers",
        metavar="NAME",
        help="Layer for the connection report. Repeatable.",
    )
    parser.add_argument(
        "--map", "-m",
        action="append",
        default=[],
        type=_parse_mapping,
        dest="mappings",
        metavar="OLD=NEW",
        help="Rename a block in the connection report. Repeatable.",
    )
    parser.add_argument(
        "--from-unit",
        default=None,
        dest="from_unit",
        help=f"Drawing units ({', '.join(SUPPORTED_UNITS)}); default from config or mm.",
    )
    parser.add_argument(
        "--to-unit",
        default=None,
        dest="to_unit",
        help=f"Report units ({', '.join(SUPPORTED_UNITS)}); default: drawing units.",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output CSV path (default: from config, next to the drawing).",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a .plreport.json configuration file.",
    )
    parser.add_argument(
        "--no-bom",
        action="store_true",
        dest="no_bom",
        help="Write the CSV without a UTF-8 byte-order mark.",
    )
    parser.add_argument(
        "--list-layers",
        action="store_true",
        dest="list_layers",
        help="Print the drawing's layer names and exit.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging.",
    )
    parser.add_argument(
        "--json-log",
        default=None,
        dest="json_log",
        metavar="PATH",
        help="Also write JSON-lines logs to PATH.",
    )
    return parser.parse_args(argv)


def _apply_arguments(config: ProjectConfig, args: argparse.Namespace) -> ProjectConfig:
    """CLI arguments override the configuration file."""
    if args.from_unit:
        config.report.source_unit = args.from_unit
    if args.to_unit:
        config.report.target_unit = args.to_unit
    if args.no_bom:
        config.output.write_bom = False
    if args.layers:
        config.analysis.layers = list(args.layers)
    for original, replacement in args.mappings:
        if replacement:
            config.block_mapping[original] = replacement
        else:
            config.block_mapping.pop(original, None)
    return config


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_file=args.json_log,
    )

    config = load_config(drawing_path=args.dxf_file, explicit_config=args.config)
    config = _apply_arguments(config, args)
    output = args.output or config.output.report_path(args.dxf_file)

    try:
        if args.list_layers:
            for name in load_drawing(args.dxf_file).layer_names():
                print(name)
            return 0

        if args.group:
            selections = [parse_group_argument(arg) for arg in args.group]
            run = run_group_report(args.dxf_file, selections, output, config=config)
            logger.info("%d groups reported, %d skipped", run.groups, run.skipped)
        else:
            run = run_layer_report(args.dxf_file, output, config=config)
            logger.info("%d polylines reported", run.groups)

        print(run.output_path)
    except DxfLoadError as exc:
        logger.critical("Cannot load drawing: %s", exc)
        return 1
    except NoGroupsCollectedError as exc:
        logger.critical("%s", exc)
        return 1
    except ExportError as exc:
        logger.critical("Export failed: %s", exc)
        return 1
    except Exception as exc:
        logger.critical("Unexpected error: %s", exc, exc_info=True)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
