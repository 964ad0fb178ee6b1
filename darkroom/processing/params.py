"""
Adjustment parameters and processing options

AdjustmentParams is an immutable snapshot of every slider for one render
request. All defaults are neutral, so ``AdjustmentParams()`` renders the
base image unchanged. Like processing recipes, parameter sets serialise to
JSON or YAML so they can be stored beside the RAW file and reapplied.
"""

import json
import math
import logging
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from ..core.result import ErrorKind, ProcessingError

logger = logging.getLogger(__name__)

# Names of the eight HSL color zones, in hue order
ZONE_NAMES: Tuple[str, ...] = (
    "red", "orange", "yellow", "green", "aqua", "blue", "purple", "magenta"
)

# Magnitude beyond which every slider saturates the image anyway
PARAM_LIMIT = 10000.0

BASIC_FIELDS = (
    "exposure", "highlights", "shadows", "whites", "blacks",
    "contrast", "brightness", "clarity", "vibrance", "saturation",
)
CURVE_FIELDS = ("curve_shadows", "curve_darks", "curve_lights", "curve_highlights")
HSL_FIELDS = tuple(
    f"{prefix}_{zone}"
    for prefix in ("hue", "saturation", "luminance")
    for zone in ZONE_NAMES
)


@dataclass(frozen=True)
class AdjustmentParams:
    """
    Every user-tunable adjustment for a single render

    Percent sliders nominally span -100 to +100; values outside that range
    are accepted and clamped inside the stages rather than rejected.
    """
    # Basic tonal
    exposure: float = 0.0     # EV stops, image multiplied by 2^exposure
    highlights: float = 0.0   # -100 to +100
    shadows: float = 0.0      # -100 to +100
    whites: float = 0.0       # -100 to +100
    blacks: float = 0.0       # -100 to +100
    contrast: float = 0.0     # -100 to +100
    brightness: float = 0.0   # -100 to +100, additive offset
    clarity: float = 0.0      # -100 to +100, local contrast
    vibrance: float = 0.0     # -100 to +100, boosts muted colors only
    saturation: float = 0.0   # -100 to +100

    # White balance (heuristic, relative to the as-shot balance)
    temperature: float = 0.0  # positive = warmer
    tint: float = 0.0         # positive = magenta, negative = green

    # HSL per color zone
    hue_red: float = 0.0      # degrees
    hue_orange: float = 0.0
    hue_yellow: float = 0.0
    hue_green: float = 0.0
    hue_aqua: float = 0.0
    hue_blue: float = 0.0
    hue_purple: float = 0.0
    hue_magenta: float = 0.0

    saturation_red: float = 0.0  # percent
    saturation_orange: float = 0.0
    saturation_yellow: float = 0.0
    saturation_green: float = 0.0
    saturation_aqua: float = 0.0
    saturation_blue: float = 0.0
    saturation_purple: float = 0.0
    saturation_magenta: float = 0.0

    luminance_red: float = 0.0  # percent
    luminance_orange: float = 0.0
    luminance_yellow: float = 0.0
    luminance_green: float = 0.0
    luminance_aqua: float = 0.0
    luminance_blue: float = 0.0
    luminance_purple: float = 0.0
    luminance_magenta: float = 0.0

    # Tone curve bands
    curve_shadows: float = 0.0     # [0, 0.25)
    curve_darks: float = 0.0       # [0.25, 0.5)
    curve_lights: float = 0.0      # [0.5, 0.75)
    curve_highlights: float = 0.0  # [0.75, 1]

    # Detail
    sharpening: float = 0.0
    noise_reduction: float = 0.0
    color_noise_reduction: float = 0.0

    # Lens corrections
    lens_distortion: float = 0.0
    chromatic_aberration: float = 0.0  # carried for round-tripping, not rendered
    vignetting: float = 0.0

    # Geometry
    rotation: float = 0.0  # degrees, counter-clockwise
    crop_left: float = 0.0
    crop_top: float = 0.0
    crop_right: float = 1.0
    crop_bottom: float = 1.0

    def __post_init__(self):
        # Frozen, so coerce through object.__setattr__
        for f in fields(self):
            value = getattr(self, f.name)
            try:
                object.__setattr__(self, f.name, float(value))
            except (TypeError, ValueError):
                raise ProcessingError(
                    ErrorKind.INVALID_PARAMETERS,
                    f"Adjustment parameter {f.name} must be a number, got {value!r}"
                )

    # Predicates used by stages for their identity fast paths

    def is_identity(self) -> bool:
        return self == AdjustmentParams()

    def has_white_balance(self) -> bool:
        return self.temperature != 0.0 or self.tint != 0.0

    def has_basic_adjustments(self) -> bool:
        return any(getattr(self, name) != 0.0 for name in BASIC_FIELDS)

    def has_hsl_adjustments(self) -> bool:
        return any(getattr(self, name) != 0.0 for name in HSL_FIELDS)

    def has_curve_adjustments(self) -> bool:
        return any(getattr(self, name) != 0.0 for name in CURVE_FIELDS)

    def has_detail_adjustments(self) -> bool:
        return (self.sharpening != 0.0 or self.noise_reduction != 0.0
                or self.color_noise_reduction != 0.0)

    def has_lens_corrections(self) -> bool:
        return self.vignetting != 0.0 or self.lens_distortion != 0.0

    def has_crop(self) -> bool:
        return (self.crop_left != 0.0 or self.crop_top != 0.0
                or self.crop_right != 1.0 or self.crop_bottom != 1.0)

    def zone_deltas(self, zone: str) -> Tuple[float, float, float]:
        """(hue, saturation, luminance) deltas for one named zone"""
        return (
            getattr(self, f"hue_{zone}"),
            getattr(self, f"saturation_{zone}"),
            getattr(self, f"luminance_{zone}"),
        )

    def sanitized(self) -> "AdjustmentParams":
        """
        Copy that is safe to feed to the stages

        NaN falls back to the neutral default and infinities or huge
        magnitudes are clamped to +/-PARAM_LIMIT.
        """
        changes = {}
        for f in fields(self):
            value = float(getattr(self, f.name))
            if math.isnan(value):
                value = f.default
            else:
                value = min(max(value, -PARAM_LIMIT), PARAM_LIMIT)
            changes[f.name] = value
        return replace(self, **changes)

    def non_default_fields(self) -> Dict[str, float]:
        """Fields that differ from the neutral default"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) != f.default
        }

    # Serialisation

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdjustmentParams":
        """
        Build a parameter set from a mapping of field name to number

        Missing fields keep their neutral defaults.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ProcessingError(
                ErrorKind.INVALID_PARAMETERS,
                f"Adjustment parameters must be a mapping, got {type(data).__name__}"
            )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ProcessingError(
                ErrorKind.INVALID_PARAMETERS,
                f"Unknown adjustment parameters: {', '.join(unknown)}"
            )
        values = {}
        for name, value in data.items():
            try:
                values[name] = float(value)
            except (TypeError, ValueError):
                raise ProcessingError(
                    ErrorKind.INVALID_PARAMETERS,
                    f"Adjustment parameter {name} must be a number, got {value!r}"
                )
        return cls(**values)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "AdjustmentParams":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ProcessingError(ErrorKind.INVALID_FORMAT, f"Invalid JSON parameters: {e}")
        return cls.from_dict(data)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "AdjustmentParams":
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ProcessingError(ErrorKind.INVALID_FORMAT, f"Invalid YAML parameters: {e}")
        return cls.from_dict(data or {})

    def save(self, path: Union[str, Path]) -> None:
        """Save to ``path``; ``.json`` files get JSON, anything else YAML"""
        path = Path(path)
        text = self.to_json() if path.suffix.lower() == ".json" else self.to_yaml()
        with open(path, 'w') as f:
            f.write(text)
        logger.debug(f"Saved adjustment parameters to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AdjustmentParams":
        path = Path(path)
        if not path.exists():
            raise ProcessingError(ErrorKind.FILE_NOT_FOUND, f"Parameter file not found: {path}")
        with open(path, 'r') as f:
            text = f.read()
        if path.suffix.lower() == ".json":
            return cls.from_json(text)
        return cls.from_yaml(text)


@dataclass(frozen=True)
class ProcessingOptions:
    """
    Output sizing and quality for one render

    A zero width or height means "use the decoded size" on that axis.
    ``preview_mode`` only trades resolution for speed; it never changes the
    adjustment math.
    """
    output_width: int = 0
    output_height: int = 0
    quality: int = 95         # JPEG quality (1-100) used when saving
    preview_mode: bool = False
    thread_hint: int = 0      # 0 = automatic

    PREVIEW_MAX_WIDTH = 1920
    PREVIEW_MAX_HEIGHT = 1080
    PREVIEW_QUALITY = 85

    @classmethod
    def for_preview(cls, max_width: int = PREVIEW_MAX_WIDTH,
                    max_height: int = PREVIEW_MAX_HEIGHT,
                    quality: int = PREVIEW_QUALITY) -> "ProcessingOptions":
        """Bounded, lower quality options for interactive previews"""
        return cls(
            output_width=max_width,
            output_height=max_height,
            quality=quality,
            preview_mode=True
        )

    def with_full_resolution(self) -> "ProcessingOptions":
        return replace(self, preview_mode=False)

    def normalized(self) -> "ProcessingOptions":
        """Clamp negative sizes to 0 and quality into 1-100"""
        return replace(
            self,
            output_width=max(0, int(self.output_width)),
            output_height=max(0, int(self.output_height)),
            quality=min(max(int(self.quality), 1), 100),
            thread_hint=max(0, int(self.thread_hint))
        )

    def bounds(self) -> Tuple[int, int]:
        return (self.output_width, self.output_height)

    def has_output_bounds(self) -> bool:
        return self.output_width > 0 and self.output_height > 0
