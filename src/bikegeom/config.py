"""
Configuration management for bikegeom.

Loads YAML configuration with sensible defaults for all analysis stages.
"""

import os
from dataclasses import asdict, dataclass, field, fields, replace

import yaml


@dataclass(frozen=True)
class GeometryConfig:
    """Thresholds for wheel pairing and frame reasoning."""
    concentric_circle_tolerance_ratio: float = 0.15
    min_concentric_radius_diff: float = 0.02  # fraction of image height
    max_concentric_radius_diff_ratio: float = 0.4
    frame_component_length_threshold: float = 0.7
    frame_component_angle_threshold: float = 0.6  # radians
    frame_min_component_length: float = 0.05  # fraction of image diagonal
    frame_max_head_tube_ratio: float = 0.3


@dataclass(frozen=True)
class PreprocessConfig:
    """Configuration for grayscale conversion and blur."""
    blur_kernel: int = 5
    min_width: int = 1024
    min_height: int = 768
    max_width: int = 4096
    max_height: int = 3072


@dataclass(frozen=True)
class HoughCirclesConfig:
    """Configuration for wheel circle extraction."""
    dp: float = 1.2
    min_dist: float = 0.2  # fraction of scaling dimension
    param1: float = 100.0
    param2: float = 50.0
    min_radius: float = 0.08  # fraction of scaling dimension
    max_radius: float = 0.3  # fraction of scaling dimension
    wide_aspect_ratio: float = 1.5
    wide_param2_factor: float = 0.9


@dataclass(frozen=True)
class HoughLinesConfig:
    """Configuration for frame line extraction."""
    canny_low: float = 50.0
    canny_high: float = 150.0
    threshold: int = 50
    min_line_length: int = 20
    max_line_gap: int = 10


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_edge_scale: int = 1600


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    hough_circles: HoughCirclesConfig = field(default_factory=HoughCirclesConfig)
    hough_lines: HoughLinesConfig = field(default_factory=HoughLinesConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


SECTIONS = ("geometry", "preprocess", "hough_circles", "hough_lines", "tracing", "debug")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section in SECTIONS:
        values = yaml_data.get(section)
        if not values:
            continue

        current = getattr(config, section)
        known = {f.name for f in fields(current)}
        updates = {k: v for k, v in values.items() if k in known}

        # Frozen sections cannot be mutated in place
        setattr(config, section, replace(current, **updates))

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = PipelineConfig()

    yaml_data = {section: asdict(getattr(config, section)) for section in SECTIONS}
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
