"""
Hue zones used by HSL grading

Eight named sectors plus a second red sector that closes the hue circle
at 360 degrees. Ranges are half-open ``[min_hue, max_hue)`` in degrees.

Greys have no hue and convert to hue 0, so they sit inside the first red
sector. Red zone deltas therefore reach neutral tones too: ``luminance_red``
brightens or darkens greys along with reds, and ``hue_red`` leaves them
unchanged only because a grey has no saturation to carry a hue.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..params import AdjustmentParams

# (zone name, min hue, max hue)
ZONE_TABLE: Tuple[Tuple[str, float, float], ...] = (
    ("red", 0.0, 15.0),
    ("orange", 15.0, 45.0),
    ("yellow", 45.0, 75.0),
    ("green", 75.0, 105.0),
    ("aqua", 105.0, 135.0),
    ("blue", 135.0, 165.0),
    ("purple", 165.0, 195.0),
    ("magenta", 195.0, 225.0),
    ("red", 345.0, 360.0),  # wraparound
)

FULL_CIRCLE = 360.0


@dataclass(frozen=True)
class ColorZone:
    """A hue sector together with the deltas to apply inside it"""
    name: str
    min_hue: float
    max_hue: float
    hue_delta: float = 0.0
    sat_delta: float = 0.0
    lum_delta: float = 0.0

    @property
    def wraps(self) -> bool:
        """True for the sector that ends on the 360 degree seam"""
        return self.max_hue >= FULL_CIRCLE

    @property
    def is_neutral(self) -> bool:
        return self.hue_delta == 0 and self.sat_delta == 0 and self.lum_delta == 0


def build_color_zones(params: AdjustmentParams) -> List[ColorZone]:
    """Attach the per-zone deltas from ``params`` to the static table"""
    zones = []
    for name, min_hue, max_hue in ZONE_TABLE:
        hue_delta, sat_delta, lum_delta = params.zone_deltas(name)
        zones.append(ColorZone(
            name=name,
            min_hue=min_hue,
            max_hue=max_hue,
            hue_delta=hue_delta,
            sat_delta=sat_delta,
            lum_delta=lum_delta
        ))
    return zones


def hue_mask(hue: np.ndarray, zone: ColorZone) -> np.ndarray:
    """
    Binary mask of pixels whose hue falls inside ``zone``
    
    Args:
        hue: Hue channel stored at half scale (0-180)
        zone: Zone to select
        
    Returns:
        float32 mask of 0.0 / 1.0 values
    """
    low = zone.min_hue / 2.0
    high = zone.max_hue / 2.0
    if zone.wraps:
        # Up to the seam, then whatever spills past 0
        mask = (hue >= low) & (hue < FULL_CIRCLE / 2.0)
        mask |= hue < (zone.max_hue - FULL_CIRCLE) / 2.0
    else:
        mask = (hue >= low) & (hue < high)
    return mask.astype(np.float32)
