# python/hairforge/config.py
# Conversion settings for the CyHair -> Bezier pipeline
# Exists so the CLI, JSON config files and library callers share one parameter set
# RELEVANT FILES: python/hairforge/convert.py, python/hairforge/cli.py, tests/test_config.py
from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

ConfigSource = Union["ConversionConfig", Mapping[str, Any], str, Path, None]

_LOD_METRICS: Dict[str, str] = {
    "sample": "sample",
    "samples": "sample",
    "samplepoints": "sample",
    "root": "root",
    "rootpoint": "root",
    "endpoints": "endpoints",
    "startend": "endpoints",
    "rootandtip": "endpoints",
}


def _normalize_key(value: Any) -> str:
    return "".join(
        c
        for c in str(value).strip().lower()
        if c not in {"-", "_", " ", "."}
    )


def _normalize_choice(value: Any, mapping: Mapping[str, str], label: str) -> str:
    key = _normalize_key(value)
    if key not in mapping:
        raise ValueError(f"Unknown {label}: {value!r}")
    return mapping[key]


def _to_float3(value: Any, label: str) -> Tuple[float, float, float]:
    if value is None:
        raise ValueError(f"{label} requires three floats")
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return (float(value[0]), float(value[1]), float(value[2]))
    raise ValueError(f"{label} must be a sequence of three numeric values")


@dataclass
class ConversionConfig:
    vertex_scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    vertex_translate: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    max_strands: int = -1  # < 0 converts every strand
    thickness: float = -1.0  # <= 0 uses the file's default thickness
    lod_level: int = -1  # <= 0 disables the LOD merge
    lod_radius: float = 2.0
    seed: int = 0
    lod_metric: str = "sample"
    swap_yz: bool = True
    use_point_thickness: bool = False

    def to_dict(self) -> dict:
        return {
            "vertex_scale": list(self.vertex_scale),
            "vertex_translate": list(self.vertex_translate),
            "max_strands": self.max_strands,
            "thickness": self.thickness,
            "lod_level": self.lod_level,
            "lod_radius": self.lod_radius,
            "seed": self.seed,
            "lod_metric": self.lod_metric,
            "swap_yz": self.swap_yz,
            "use_point_thickness": self.use_point_thickness,
        }

    def validate(self) -> None:
        if self.lod_radius <= 0.0:
            raise ValueError("lod_radius must be positive")
        if self.seed < 0:
            raise ValueError("seed must be non-negative")
        if self.lod_metric not in set(_LOD_METRICS.values()):
            raise ValueError(f"Unknown LOD metric: {self.lod_metric!r}")

    @property
    def lod_enabled(self) -> bool:
        return self.lod_level > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["ConversionConfig"] = None) -> "ConversionConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        if "vertex_scale" in data:
            base.vertex_scale = _to_float3(data["vertex_scale"], "vertex_scale")
        if "scale" in data and "vertex_scale" not in data:
            base.vertex_scale = _to_float3(data["scale"], "scale")
        if "vertex_translate" in data:
            base.vertex_translate = _to_float3(data["vertex_translate"], "vertex_translate")
        if "translate" in data and "vertex_translate" not in data:
            base.vertex_translate = _to_float3(data["translate"], "translate")
        if "max_strands" in data:
            base.max_strands = -1 if data["max_strands"] is None else int(data["max_strands"])
        if "thickness" in data:
            base.thickness = -1.0 if data["thickness"] is None else float(data["thickness"])
        if "lod_level" in data:
            base.lod_level = -1 if data["lod_level"] is None else int(data["lod_level"])
        if "lod_radius" in data:
            base.lod_radius = float(data["lod_radius"])
        if "seed" in data:
            base.seed = int(data["seed"])
        if "lod_metric" in data:
            base.lod_metric = _normalize_choice(data["lod_metric"], _LOD_METRICS, "LOD metric")
        if "swap_yz" in data:
            base.swap_yz = bool(data["swap_yz"])
        if "use_point_thickness" in data:
            base.use_point_thickness = bool(data["use_point_thickness"])
        return base


def load_config(source: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> ConversionConfig:
    """Build a validated :class:`ConversionConfig`.

    ``source`` may be ``None`` (defaults), an existing config, a mapping, or
    the path of a JSON file holding a mapping. ``overrides`` are applied last.
    """
    if source is None:
        config = ConversionConfig()
    elif isinstance(source, ConversionConfig):
        config = copy.deepcopy(source)
    elif isinstance(source, Mapping):
        config = ConversionConfig.from_mapping(source)
    elif isinstance(source, (str, Path)):
        path = Path(source)
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, Mapping):
            raise TypeError(f"{path}: configuration file must contain a JSON object")
        config = ConversionConfig.from_mapping(data)
    else:
        raise TypeError(f"Unsupported config source: {type(source).__name__}")

    if overrides:
        config = ConversionConfig.from_mapping(overrides, default=config)
    config.validate()
    return config
