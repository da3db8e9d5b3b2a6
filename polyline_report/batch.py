"""
Batch connection reports for a folder of DXF drawings.

Provides:
- Folder-based batch export (DXF -> CSV connection report per drawing)
- Progress callback and summary
- Optional thread pool

Usage:
    from polyline_report.batch import batch_export

    results = batch_export(input_dir="./drawings", output_dir="./reports")
    print(results.summary())
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from polyline_report.pipeline import run_layer_report
from polyline_report.project_config import ProjectConfig, load_config

logger = logging.getLogger(__name__)

REPORT_SUFFIX = "_polylines"


@dataclass
class ExportResult:
    """Result of exporting one drawing."""
    input_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    polylines: int = 0
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def status(self) -> str:
        return "OK" if self.success else "FAILED"


@dataclass
class BatchResult:
    """Result of a batch export."""
    results: List[ExportResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.successful / self.total

    def summary(self) -> str:
        lines = [
            "Batch Export Summary",
            "=" * 40,
            f"Total drawings:  {self.total}",
            f"Successful:      {self.successful}",
            f"Failed:          {self.failed}",
            f"Success rate:    {self.success_rate:.1f}%",
            f"Total time:      {self.total_duration_seconds:.1f}s",
            "",
        ]

        if self.failed > 0:
            lines.append("Failed drawings:")
            for r in self.results:
                if not r.success:
                    lines.append(f"  - {r.input_path.name}: {r.error}")

        return "\n".join(lines)

    def to_dict(self) -> Dict:
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'total_duration_seconds': self.total_duration_seconds,
            'results': [
                {
                    'input': str(r.input_path),
                    'output': str(r.output_path) if r.output_path else None,
                    'success': r.success,
                    'polylines': r.polylines,
                    'error': r.error,
                    'duration': r.duration_seconds,
                }
                for r in self.results
            ],
        }


def find_dxf_files(
    input_dir: Union[str, Path],
    pattern: str = "*.dxf",
    recursive: bool = False,
) -> List[Path]:
    """Find DXF files in a directory (case-insensitive extension).

    Raises:
        FileNotFoundError: directory does not exist
        NotADirectoryError: path is a file
    """
    input_dir = Path(input_dir)

    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not input_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {input_dir}")

    glob = input_dir.rglob if recursive else input_dir.glob
    files = list(glob(pattern))
    files.extend(glob(pattern.replace('.dxf', '.DXF')))

    files = sorted(set(files))
    logger.info("Found %d DXF files in %s", len(files), input_dir)
    return files


def export_single_file(
    input_path: Path,
    output_dir: Path,
    config: Optional[ProjectConfig] = None,
    output_suffix: str = REPORT_SUFFIX,
) -> ExportResult:
    """Write the connection report of one drawing.

    Never raises: failures are recorded in the returned ExportResult.
    """
    start_time = time.perf_counter()
    output_path = output_dir / f"{input_path.stem}{output_suffix}.csv"
    result = ExportResult(input_path=input_path)

    try:
        run = run_layer_report(input_path, output_path, config=config)
        result.success = True
        result.output_path = run.output_path
        result.polylines = run.groups
    except Exception as e:
        result.error = str(e)
        logger.error("Failed to export %s: %s", input_path.name, e)

    result.duration_seconds = time.perf_counter() - start_time
    return result


def batch_export(
    input_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    pattern: str = "*.dxf",
    recursive: bool = False,
    config: Optional[ProjectConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int, ExportResult], None]] = None,
) -> BatchResult:
    """Export connection reports for every DXF file in a folder.

    Args:
        input_dir: Directory containing DXF files
        output_dir: Output directory (default: same as input)
        pattern: Glob pattern for DXF files
        recursive: Search subdirectories
        config: Project configuration
        config_path: Path to .plreport.json
        parallel: Process drawings in a thread pool
        max_workers: Maximum parallel workers
        progress_callback: Called after each file: (current, total, result)
    """
    start_time = time.perf_counter()

    input_dir = Path(input_dir)
    output_dir = Path(output_dir) if output_dir else input_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    if config is None:
        config = load_config(drawing_path=input_dir / "drawing.dxf", explicit_config=config_path)

    dxf_files = find_dxf_files(input_dir, pattern, recursive)
    if not dxf_files:
        logger.warning("No DXF files found in %s", input_dir)
        return BatchResult(total_duration_seconds=time.perf_counter() - start_time)

    logger.info("Starting batch export: %d files, parallel=%s", len(dxf_files), parallel)
    results: List[ExportResult] = []

    def _record(i: int, result: ExportResult) -> None:
        results.append(result)
        if progress_callback:
            progress_callback(i, len(dxf_files), result)
        logger.info(
            "[%d/%d] %s: %s (%.1fs)",
            i, len(dxf_files), result.input_path.name, result.status, result.duration_seconds,
        )

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(export_single_file, path, output_dir, config)
                for path in dxf_files
            ]
            for i, future in enumerate(as_completed(futures), 1):
                _record(i, future.result())
        results.sort(key=lambda r: r.input_path)
    else:
        for i, path in enumerate(dxf_files, 1):
            _record(i, export_single_file(path, output_dir, config))

    batch_result = BatchResult(
        results=results,
        total_duration_seconds=time.perf_counter() - start_time,
    )
    logger.info(
        "Batch export complete: %d/%d successful (%.1f%%) in %.1fs",
        batch_result.successful, batch_result.total,
        batch_result.success_rate, batch_result.total_duration_seconds,
    )
    return batch_result


def batch_export_cli() -> int:
    """CLI entry point for batch export."""
    import argparse

    from polyline_report.logging_config import setup_logging

    parser = argparse.ArgumentParser(
        description="Write a polyline connection report for every DXF file in a folder"
    )
    parser.add_argument(
        "input_dir",
        help="Directory containing DXF files"
    )
    parser.add_argument(
        "-o", "--output",
        dest="output_dir",
        help="Output directory (default: same as input)"
    )
    parser.add_argument(
        "-p", "--pattern",
        default="*.dxf",
        help="File pattern (default: *.dxf)"
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Search subdirectories"
    )
    parser.add_argument(
        "-c", "--config",
        dest="config_path",
        help="Path to .plreport.json config file"
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Use a thread pool"
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        dest="max_workers",
        help="Maximum parallel jobs"
    )

    args = parser.parse_args()
    setup_logging(level=logging.INFO)

    try:
        result = batch_export(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            pattern=args.pattern,
            recursive=args.recursive,
            config_path=args.config_path,
            parallel=args.parallel,
            max_workers=args.max_workers,
        )

        print("\n" + result.summary())

        return 0 if result.failed == 0 else 1

    except (FileNotFoundError, NotADirectoryError) as e:
        logger.error("Batch export failed: %s", e)
        return 1


if __name__ == "__main__":
    import sys
    sys.exit(batch_export_cli())
