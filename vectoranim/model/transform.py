"""
Transform value types shared by commands and compiled spans.

- Matrix: 2x3 affine transform {a, b, c, d, tx, ty}
- ColorTransform: per-channel multiply/add, normalized to 0.0-1.0
- BlendMode: blend mode names as emitted in the output document

Matrix convention (same as the source container):
    x' = a * x + c * y + tx
    y' = b * x + d * y + ty

Composition uses 3x3 homogeneous matrices, parent-then-child:
    world = parent @ child
"""

from enum import Enum
from typing import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


# Native color transform encoding: multipliers are 8.8 fixed point, additive
# terms are signed 8-bit channel offsets.
NATIVE_MULT_ONE = 256.0
NATIVE_ADD_RANGE = 255.0


class BlendMode(str, Enum):
    """Blend modes supported by the container format."""
    NORMAL = "Normal"
    LAYER = "Layer"
    MULTIPLY = "Multiply"
    SCREEN = "Screen"
    LIGHTEN = "Lighten"
    DARKEN = "Darken"
    DIFFERENCE = "Difference"
    ADD = "Add"
    SUBTRACT = "Subtract"
    INVERT = "Invert"
    ALPHA = "Alpha"
    ERASE = "Erase"
    OVERLAY = "Overlay"
    HARD_LIGHT = "HardLight"


class Matrix(BaseModel):
    """2x3 affine transform. Defaults to identity."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    a: float = Field(default=1.0)
    b: float = Field(default=0.0)
    c: float = Field(default=0.0)
    d: float = Field(default=1.0)
    tx: float = Field(default=0.0)
    ty: float = Field(default=0.0)

    @classmethod
    def identity(cls) -> 'Matrix':
        return cls()

    @classmethod
    def translate(cls, tx: float, ty: float) -> 'Matrix':
        return cls(tx=tx, ty=ty)

    @classmethod
    def scale(cls, sx: float, sy: float) -> 'Matrix':
        return cls(a=sx, d=sy)

    @classmethod
    def rotate(cls, radians: float) -> 'Matrix':
        cos, sin = float(np.cos(radians)), float(np.sin(radians))
        return cls(a=cos, b=sin, c=-sin, d=cos)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> 'Matrix':
        """
        Create a matrix from a 3x3 (or 2x3) homogeneous array.

        Args:
            arr: Array laid out as [[a, c, tx], [b, d, ty], [0, 0, 1]]

        Returns:
            Matrix instance
        """
        if arr.shape not in ((3, 3), (2, 3)):
            raise ValueError(f"Expected 3x3 or 2x3 array, got {arr.shape}")
        return cls(
            a=float(arr[0, 0]),
            b=float(arr[1, 0]),
            c=float(arr[0, 1]),
            d=float(arr[1, 1]),
            tx=float(arr[0, 2]),
            ty=float(arr[1, 2]),
        )

    def to_array(self) -> np.ndarray:
        """Return the 3x3 homogeneous float64 array of this transform."""
        return np.array(
            [
                [self.a, self.c, self.tx],
                [self.b, self.d, self.ty],
                [0.0, 0.0, 1.0],
            ],
            dtype=np.float64,
        )

    def compose(self, child: 'Matrix') -> 'Matrix':
        """
        Compose this (parent) transform with a child transform.

        The child is applied first, then this matrix.
        """
        return Matrix.from_array(self.to_array() @ child.to_array())

    def __matmul__(self, other: 'Matrix') -> 'Matrix':
        return self.compose(other)

    def transform_point(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.tx, self.b * x + self.d * y + self.ty)

    def scaled(self, factor: float, *, translation_only: bool = False) -> 'Matrix':
        """
        Scale the matrix by a global factor.

        Args:
            factor: Uniform scale factor
            translation_only: If True only tx/ty are scaled

        Returns:
            New Matrix
        """
        if translation_only:
            return self.model_copy(update={'tx': self.tx * factor, 'ty': self.ty * factor})
        return Matrix(
            a=self.a * factor,
            b=self.b * factor,
            c=self.c * factor,
            d=self.d * factor,
            tx=self.tx * factor,
            ty=self.ty * factor,
        )

    def is_identity(self) -> bool:
        return self == Matrix()


class ColorTransform(BaseModel):
    """
    Per-channel color transform, applied as ``out = in * mult + add``.

    Both tuples are RGBA and normalized to 0.0-1.0 so that renderers never
    see the container's native encoding.
    """

    model_config = ConfigDict(frozen=True, extra='ignore')

    mult_color: tuple[float, float, float, float] = Field(default=(1.0, 1.0, 1.0, 1.0))
    add_color: tuple[float, float, float, float] = Field(default=(0.0, 0.0, 0.0, 0.0))

    @classmethod
    def identity(cls) -> 'ColorTransform':
        return cls()

    @classmethod
    def from_native(cls, mult: Sequence[int], add: Sequence[int]) -> 'ColorTransform':
        """
        Convert from the container's native encoding.

        Args:
            mult: RGBA multipliers as 8.8 fixed point (256 == 1.0)
            add: RGBA additive terms in -255..255

        Returns:
            Normalized ColorTransform
        """
        if len(mult) != 4 or len(add) != 4:
            raise ValueError("Color transform terms must have 4 channels (RGBA)")
        return cls(
            mult_color=tuple(m / NATIVE_MULT_ONE for m in mult),
            add_color=tuple(a / NATIVE_ADD_RANGE for a in add),
        )

    def apply(self, rgba: Sequence[float]) -> tuple[float, ...]:
        """Apply the transform to a normalized RGBA color, clamped to 0.0-1.0."""
        out = np.asarray(rgba, dtype=np.float64) * self.mult_color + self.add_color
        return tuple(float(v) for v in np.clip(out, 0.0, 1.0))

    def is_identity(self) -> bool:
        return self == ColorTransform()
