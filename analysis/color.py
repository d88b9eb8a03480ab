"""
Color values and the ink folding policy.

An "ink" is a color reshaped to match an image's band count so it can be
compared against pixels or used as a fill value.
"""

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Tuple

# Rec. 709 luma weights
LUMA_RED = 0.2126
LUMA_GREEN = 0.7152
LUMA_BLUE = 0.0722

OPAQUE_ALPHA = 255.0


def ink_for_bands(values: Sequence[float], bands: int) -> List[float]:
    """
    Fold a color into the ink used for an image with `bands` bands.

    Args:
        values: Color components (1 value is treated as grey, 3+ as R, G, B, ...)
        bands: Band count of the target image

    Returns:
        1 band: luminance; 4 bands: R, G, B + opaque alpha;
        any other count: R, G, B
    """
    if len(values) == 0:
        raise ValueError("Cannot build an ink from an empty color")

    red = float(values[0])
    green = float(values[1]) if len(values) >= 3 else red
    blue = float(values[2]) if len(values) >= 3 else red

    if bands == 1:
        return [LUMA_RED * red + LUMA_GREEN * green + LUMA_BLUE * blue]
    if bands == 4:
        return [red, green, blue, OPAQUE_ALPHA]
    return [red, green, blue]


@dataclass(frozen=True)
class Color:
    """Per-band color values on the 0-255 scale."""
    values: Tuple[float, ...]

    WHITE: ClassVar["Color"]
    BLACK: ClassVar["Color"]

    def __init__(self, values: Sequence[float]):
        object.__setattr__(self, "values", tuple(float(v) for v in values))

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> "Color":
        return cls((red, green, blue))

    @property
    def red(self) -> float:
        return self.values[0]

    @property
    def green(self) -> float:
        return self.values[1 if len(self.values) >= 3 else 0]

    @property
    def blue(self) -> float:
        return self.values[2 if len(self.values) >= 3 else 0]

    @property
    def alpha(self) -> Optional[float]:
        return self.values[3] if len(self.values) >= 4 else None

    def ink(self, bands: int) -> List[float]:
        return ink_for_bands(self.values, bands)

    def as_tuple(self) -> Tuple[float, ...]:
        return self.values

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index):
        return self.values[index]


Color.WHITE = Color.from_rgb(255, 255, 255)
Color.BLACK = Color.from_rgb(0, 0, 0)
