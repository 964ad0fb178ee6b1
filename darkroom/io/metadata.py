"""
Shooting metadata record
"""

import json
from dataclasses import dataclass
from typing import Any, Dict

from ..processing.color.white_balance import estimate_color_temperature
from .decoder import RawFields


@dataclass(frozen=True)
class RawMetadata:
    """Shooting metadata extracted from a loaded RAW file"""
    camera_make: str = ""
    camera_model: str = ""
    lens_model: str = ""
    iso: int = 0
    aperture: float = 0.0
    shutter_speed: str = ""
    focal_length: float = 0.0
    flash_used: bool = False
    orientation: int = 1
    white_balance: str = ""
    color_space: str = "sRGB"
    image_width: int = 0
    image_height: int = 0
    color_temperature: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: one decimal for aperture/focal length, integral Kelvin"""
        return {
            'camera_make': self.camera_make,
            'camera_model': self.camera_model,
            'lens_model': self.lens_model,
            'iso': self.iso,
            'aperture': round(self.aperture, 1),
            'shutter_speed': self.shutter_speed,
            'focal_length': round(self.focal_length, 1),
            'flash_used': self.flash_used,
            'orientation': self.orientation,
            'white_balance': self.white_balance,
            'color_space': self.color_space,
            'image_width': self.image_width,
            'image_height': self.image_height,
            'color_temperature': int(round(self.color_temperature)),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def format_shutter_speed(seconds: float) -> str:
    """
    Display string for an exposure time

    Whole seconds as "2s", fractions as "1/250", unknown as "".
    """
    if not seconds or seconds <= 0:
        return ""
    if seconds >= 1.0:
        return f"{int(seconds)}s"
    return f"1/{int(round(1.0 / seconds))}"


def metadata_from_fields(fields: RawFields) -> RawMetadata:
    return RawMetadata(
        camera_make=fields.make,
        camera_model=fields.model,
        lens_model=fields.lens,
        iso=int(fields.iso),
        aperture=float(fields.aperture),
        shutter_speed=format_shutter_speed(fields.shutter),
        focal_length=float(fields.focal_length),
        flash_used=bool(fields.flash_used),
        orientation=int(fields.flip),
        white_balance=fields.white_balance,
        image_width=int(fields.width),
        image_height=int(fields.height),
        color_temperature=estimate_color_temperature(fields.wb_coeffs)
    )
