from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple

import numpy as np

from block_puzzle_engine.exceptions import InvalidShapeError, UnknownFamilyError


Shape = np.ndarray


def as_shape(rows: Sequence[Sequence[int]] | np.ndarray) -> Shape:
    """Build a read-only 0/1 shape matrix, rejecting malformed data."""
    try:
        arr = np.array(rows, dtype=np.int8)
    except (TypeError, ValueError) as exc:
        raise InvalidShapeError(f"Shape is not a rectangular matrix: {rows!r}") from exc
    if arr.ndim != 2 or arr.size == 0:
        raise InvalidShapeError(f"Shape must be a non-empty 2-D matrix, got {arr.shape}")
    if not np.isin(arr, (0, 1)).all():
        raise InvalidShapeError("Shape cells must be 0 or 1")
    if not arr.any():
        raise InvalidShapeError("Shape has no occupied cell")
    arr.flags.writeable = False
    return arr


def rotate_clockwise(shape: Shape) -> Shape:
    # (r, c) -> (c, R - 1 - r)
    rotated = np.ascontiguousarray(np.rot90(shape, 1, axes=(1, 0)))
    rotated.flags.writeable = False
    return rotated


def shapes_equal(a: Shape, b: Shape) -> bool:
    return a.shape == b.shape and bool(np.array_equal(a, b))


def all_rotations(base: Shape) -> Tuple[Shape, ...]:
    """Distinct clockwise rotations of `base`, starting with `base` itself."""
    rotations: List[Shape] = []
    current = base
    for _ in range(4):
        if not any(shapes_equal(current, existing) for existing in rotations):
            rotations.append(current)
        current = rotate_clockwise(current)
    return tuple(rotations)


def count_blocks_in_shape(shape: Shape) -> int:
    return int(np.count_nonzero(shape))


@dataclass(frozen=True, eq=False)
class ShapeFamily:
    name: str
    code: int
    base: Shape
    color: str
    weight: float
    rotations: Tuple[Shape, ...] = field(default=())

    def has_rotation(self, shape: Shape) -> bool:
        return any(shapes_equal(shape, r) for r in self.rotations)

    def rotation_index(self, shape: Shape) -> int:
        for i, r in enumerate(self.rotations):
            if shapes_equal(shape, r):
                return i
        return -1


@dataclass(frozen=True, eq=False)
class Piece:
    """A drawable hand entry: one rotation of a family plus its colour."""

    family: str
    shape: Shape
    color: str
    code: int

    @property
    def block_count(self) -> int:
        return count_blocks_in_shape(self.shape)

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        ys, xs = np.nonzero(self.shape)
        return [(origin_x + int(dx), origin_y + int(dy)) for dy, dx in zip(ys, xs)]


# name: (base, color, weight)
FAMILY_TABLE: Dict[str, Tuple[List[List[int]], str, float]] = {
    "I": ([[1, 1, 1, 1]], "#00A5E5", 1.0),
    "O2": ([[1, 1], [1, 1]], "#FF7F11", 1.0),
    "T": ([[0, 1, 0], [1, 1, 1]], "#C874D9", 1.0),
    "S": ([[0, 1, 1], [1, 1, 0]], "#2ECC71", 0.9),
    "Z": ([[1, 1, 0], [0, 1, 1]], "#E74C3C", 0.9),
    "J": ([[1, 0, 0], [1, 1, 1]], "#3498DB", 1.0),
    "L": ([[0, 0, 1], [1, 1, 1]], "#F39C12", 1.0),
    "U": ([[1, 0, 1], [1, 1, 1]], "#FF63B6", 0.7),
    "L5": ([[1, 0, 0], [1, 0, 0], [1, 1, 1]], "#9B59B6", 0.8),
    "O1": ([[1]], "#FFB30F", 0.3),
    "O3": ([[1, 1, 1], [1, 1, 1], [1, 1, 1]], "#FF3F00", 0.6),
}


class ShapeLibrary(Mapping[str, ShapeFamily]):
    """Immutable, ordered collection of shape families keyed by name.

    Family codes are fixed when the library is built and are kept by
    `subset`, so board occupants stay resolvable against the full table.
    """

    def __init__(self, families: Iterable[ShapeFamily]) -> None:
        self._families: Dict[str, ShapeFamily] = {}
        for fam in families:
            if fam.name in self._families:
                raise InvalidShapeError(f"Duplicate family name: {fam.name}")
            self._families[fam.name] = fam
        if not self._families:
            raise InvalidShapeError("A shape library needs at least one family")
        self._by_code = {fam.code: fam for fam in self._families.values()}

    @classmethod
    def from_table(cls, table: Mapping[str, Tuple[Sequence[Sequence[int]], str, float]]) -> "ShapeLibrary":
        families = []
        for code, (name, (rows, color, weight)) in enumerate(table.items(), start=1):
            if weight <= 0:
                raise InvalidShapeError(f"Family {name} needs a positive weight, got {weight}")
            base = as_shape(rows)
            families.append(
                ShapeFamily(name=name, code=code, base=base, color=color,
                            weight=float(weight), rotations=all_rotations(base))
            )
        return cls(families)

    def __getitem__(self, name: str) -> ShapeFamily:
        try:
            return self._families[name]
        except KeyError:
            raise UnknownFamilyError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._families)

    def __len__(self) -> int:
        return len(self._families)

    def by_code(self, code: int) -> ShapeFamily:
        try:
            return self._by_code[code]
        except KeyError:
            raise UnknownFamilyError(f"code {code}") from None

    def index_of(self, name: str) -> int:
        """Position of a family in library order (observation encoding)."""
        for i, key in enumerate(self._families):
            if key == name:
                return i
        raise UnknownFamilyError(name)

    def subset(self, names: Iterable[str]) -> "ShapeLibrary":
        return ShapeLibrary(self[name] for name in names)

    def max_extent(self) -> int:
        return max(max(r.shape) for fam in self._families.values() for r in fam.rotations)

    def color_for(self, code: int) -> str | None:
        fam = self._by_code.get(int(code))
        return fam.color if fam is not None else None


@lru_cache(maxsize=1)
def default_library() -> ShapeLibrary:
    return ShapeLibrary.from_table(FAMILY_TABLE)
