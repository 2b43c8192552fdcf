"""Volume class for dotvox.

The goal of this module is to provide an interface for building voxel models
one voxel at a time and turning them into Data that can be written as a .vox
file, without dealing with packed voxels or palette indices directly.
"""

from dataclasses import dataclass
from typing import Optional

from dotvox.data import Data, Model
from dotvox.voxfile import (
    PALETTE_SIZE,
    Dimensions,
    Palette,
    VoxelList,
    pack_color,
    pack_voxel,
    unpack_color,
    unpack_voxel,
)

# coordinates are stored as single bytes
MAX_EDGE = 256


@dataclass(frozen=True)
class Color:
    """Color class."""

    r: int
    g: int
    b: int
    a: int = 255


class ColorUsage:
    """Counts how many voxels use each color.

    Palette index 0 means "empty", so at most 255 colors can be in use.
    """

    def __init__(self):
        self.color_count_map: dict[Color, int] = {}

    def use_color(self, color: Color):
        if color in self.color_count_map:
            self.color_count_map[color] += 1
        else:
            if len(self.color_count_map) >= PALETTE_SIZE - 1:
                raise ValueError("Palette is full.")
            self.color_count_map[color] = 1

    def unuse_color(self, color: Color):
        if color not in self.color_count_map:
            raise ValueError("Color is not in palette.")
        self.color_count_map[color] -= 1
        if self.color_count_map[color] == 0:
            del self.color_count_map[color]


class Volume:
    """Volume class."""

    def __init__(self, size: tuple[int, int, int]):
        for i in range(3):
            if size[i] < 1 or size[i] > MAX_EDGE:
                raise ValueError(f"Size {i} out of bounds: {size[i]} not in [1, {MAX_EDGE}]")

        self.size = size
        self.voxels: list[Optional[Color]] = [
            None for _ in range(size[0] * size[1] * size[2])
        ]
        self.colors = ColorUsage()

    def _offset(self, index: tuple[int, int, int]) -> int:
        for i in range(3):
            if index[i] < 0 or index[i] >= self.size[i]:
                raise ValueError(
                    f"Index {i} out of bounds: {index[i]} not in [0, {self.size[i]})"
                )
        return index[0] + index[1] * self.size[0] + index[2] * self.size[0] * self.size[1]

    def set(self, index: tuple[int, int, int], color: Optional[Color]):
        offset = self._offset(index)

        prev_color = self.voxels[offset]
        if prev_color is not None:
            self.colors.unuse_color(prev_color)

        if color is not None:
            try:
                self.colors.use_color(color)
            except ValueError:
                if prev_color is not None:
                    self.colors.use_color(prev_color)
                raise

        self.voxels[offset] = color

    def get(self, index: tuple[int, int, int]) -> Optional[Color]:
        return self.voxels[self._offset(index)]

    def to_model(self, color_to_index: dict[Color, int]) -> Model:
        """Build a model, looking up each voxel's palette index."""
        voxels = []
        for x in range(self.size[0]):
            for y in range(self.size[1]):
                for z in range(self.size[2]):
                    color = self.get((x, y, z))
                    if color is not None:
                        voxels.append(pack_voxel(x, y, z, color_to_index[color]))

        return Model(Dimensions(*self.size), VoxelList(voxels))

    def to_data(self) -> Data:
        """Build a single model Data with a palette holding this volume's colors."""
        color_to_index = {}
        entries = [0] * PALETTE_SIZE
        for i, color in enumerate(self.colors.color_count_map.keys()):
            # palette entry i holds color index i + 1
            color_to_index[color] = i + 1
            entries[i] = pack_color(color.r, color.g, color.b, color.a)

        return Data([self.to_model(color_to_index)], Palette(entries))

    @classmethod
    def from_model(cls, model: Model, palette: Palette) -> "Volume":
        """Build a volume from a decoded model and its file's palette."""
        dimensions = model.dimensions
        volume = cls((dimensions.x, dimensions.y, dimensions.z))

        for voxel in model.voxels.voxels:
            x, y, z, color_index = unpack_voxel(voxel)
            if color_index == 0:
                continue
            volume.set((x, y, z), Color(*unpack_color(palette.entries[color_index - 1])))

        return volume
