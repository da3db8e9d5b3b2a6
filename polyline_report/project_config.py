"""
JSON-based project configuration for polyline_report.

Configuration hierarchy (later overrides earlier):
1. Built-in defaults (config.py)
2. .plreport.json found next to the drawing, in the cwd or in ~
3. CLI arguments

Example .plreport.json:
{
    "analysis": {
        "tolerance": 1.0,
        "label_search_radius": 10.0,
        "leader_search_radius": 5.0,
        "layers": ["PIPES", "CABLES"]
    },
    "report": {
        "source_unit": "mm",
        "target_unit": "m"
    },
    "output": {
        "output_dir": "reports",
        "file_name": "pipes.csv",
        "write_bom": true
    },
    "block_mapping": {
        "VALVE_A": "Gate valve"
    }
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from polyline_report.config import (
    ARC_PARAMETER_TOLERANCE,
    ASSOCIATION_TOLERANCE,
    DEFAULT_REPORT_FILENAME,
    DEFAULT_SOURCE_UNIT,
    LABEL_SEARCH_RADIUS,
    LEADER_SEARCH_RADIUS,
    UNLABELED_GROUP_LABEL,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".plreport.json"


@dataclass
class AnalysisConfig:
    """Association distances and layer selection."""
    tolerance: float = ASSOCIATION_TOLERANCE
    label_search_radius: float = LABEL_SEARCH_RADIUS
    leader_search_radius: float = LEADER_SEARCH_RADIUS
    arc_tolerance: float = ARC_PARAMETER_TOLERANCE
    layers: List[str] = field(default_factory=list)


@dataclass
class ReportConfig:
    """Units and labels of the report table."""
    source_unit: str = DEFAULT_SOURCE_UNIT
    target_unit: Optional[str] = None  # None = report in source units
    unlabeled_label: str = UNLABELED_GROUP_LABEL


@dataclass
class OutputConfig:
    """CSV export settings."""
    output_dir: str = ""
    file_name: str = DEFAULT_REPORT_FILENAME
    write_bom: bool = True

    def report_path(self, drawing_path: Optional[Union[str, Path]] = None) -> Path:
        """Target CSV path; relative output_dir is taken from the drawing's folder."""
        base = Path(self.output_dir) if self.output_dir else Path()
        if not base.is_absolute() and drawing_path is not None:
            base = Path(drawing_path).parent / base
        return base / self.file_name


def _update_section(section: Any, values: Dict[str, Any]) -> None:
    known = {f.name for f in fields(section)}
    for key, value in values.items():
        if key in known:
            setattr(section, key, value)
        elif not key.startswith("_"):
            logger.warning("Unknown config key %s.%s ignored", type(section).__name__, key)


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    block_mapping: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from a dictionary.

        Unknown keys are ignored; keys starting with "_" are comments.
        Block mapping entries with an empty name on either side are dropped.
        """
        config = cls()

        if 'analysis' in data:
            _update_section(config.analysis, data['analysis'])
        if 'report' in data:
            _update_section(config.report, data['report'])
        if 'output' in data:
            _update_section(config.output, data['output'])

        for original, replacement in data.get('block_mapping', {}).items():
            if original.startswith("_"):
                continue
            original = str(original).strip()
            replacement = str(replacement or "").strip()
            if original and replacement:
                config.block_mapping[original] = replacement

        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    drawing_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find the configuration file.

    Search order:
    1. Explicit config path (if provided)
    2. .plreport.json in the drawing's directory
    3. .plreport.json in the current working directory
    4. ~/.plreport.json
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    candidates = []
    if drawing_path:
        candidates.append(Path(drawing_path).parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_config(
    drawing_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration, falling back to defaults if none is found or it is invalid."""
    config_path = find_config_file(drawing_path, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> Path:
    """Write a commented sample configuration file."""
    sample = {
        "_comment": "Polyline report configuration",
        "analysis": {
            "_comment": "Distances in drawing units",
            "tolerance": ASSOCIATION_TOLERANCE,
            "label_search_radius": LABEL_SEARCH_RADIUS,
            "leader_search_radius": LEADER_SEARCH_RADIUS,
            "layers": [],
        },
        "report": {
            "_comment": "Units: mm, cm, m, km",
            "source_unit": DEFAULT_SOURCE_UNIT,
            "target_unit": None,
        },
        "output": {
            "output_dir": "",
            "file_name": DEFAULT_REPORT_FILENAME,
            "write_bom": True,
        },
        "block_mapping": {
            "_comment": "Original block name -> name shown in the report",
        },
    }

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
    return path
