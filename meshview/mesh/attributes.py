# meshview/mesh/attributes.py
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from meshview.types import FloatArray


class AttributeLocation(str, Enum):
    """Whether an attribute holds one entry per point or per cell."""

    POINT = "point"
    CELL = "cell"


class AttributeKind(str, Enum):
    SCALAR = "scalar"
    COLOR_SCALAR = "color_scalar"
    VECTOR = "vector"
    TENSOR = "tensor"


def _as_float_array(values, shape: Tuple[int, ...] | None = None) -> FloatArray:
    arr = np.array(values, dtype=np.float32)
    if shape is not None:
        arr = arr.reshape(shape)
    return arr


@dataclass(frozen=True, slots=True, eq=False)
class ScalarAttribute:
    """
    Scalar data with ``num_comp`` components per element, stored flat.

    Lookup-table entries reuse this type: they carry an inline RGBA table
    and their ``data`` is the table itself, not per-element values.
    """

    num_comp: int
    table_name: str
    data: FloatArray
    lookup_table: Optional[FloatArray] = None

    kind: ClassVar[AttributeKind] = AttributeKind.SCALAR

    @classmethod
    def create(
        cls,
        data,
        *,
        num_comp: int = 1,
        table_name: str = "default",
        lookup_table=None,
    ) -> ScalarAttribute:
        lut = None
        if lookup_table is not None:
            lut = _as_float_array(lookup_table, (-1, 4))
        return cls(num_comp, table_name, _as_float_array(data).ravel(), lut)

    @property
    def components(self) -> int:
        return self.num_comp

    @property
    def is_lookup_table(self) -> bool:
        return self.lookup_table is not None

    def __len__(self) -> int:
        return len(self.data) // max(self.num_comp, 1)

    def rows(self) -> FloatArray:
        return self.data.reshape(-1, max(self.num_comp, 1))

    def with_rows(self, rows: FloatArray) -> ScalarAttribute:
        lut = None if self.lookup_table is None else self.lookup_table.copy()
        return replace(
            self,
            data=np.ascontiguousarray(rows, dtype=np.float32).ravel(),
            lookup_table=lut,
        )


@dataclass(frozen=True, slots=True, eq=False)
class ColorScalarAttribute:
    """Direct colours, ``nvalues`` (3 or 4) channels per element."""

    nvalues: int
    data: FloatArray

    kind: ClassVar[AttributeKind] = AttributeKind.COLOR_SCALAR

    @classmethod
    def create(cls, data, nvalues: int) -> ColorScalarAttribute:
        return cls(nvalues, _as_float_array(data, (-1, nvalues)))

    @property
    def components(self) -> int:
        return self.nvalues

    def __len__(self) -> int:
        return self.data.shape[0]

    def rows(self) -> FloatArray:
        return self.data

    def with_rows(self, rows: FloatArray) -> ColorScalarAttribute:
        return replace(self, data=np.array(rows, dtype=np.float32))


@dataclass(frozen=True, slots=True, eq=False)
class VectorAttribute:
    data: FloatArray

    kind: ClassVar[AttributeKind] = AttributeKind.VECTOR

    @classmethod
    def create(cls, data) -> VectorAttribute:
        return cls(_as_float_array(data, (-1, 3)))

    @property
    def components(self) -> int:
        return 3

    def __len__(self) -> int:
        return self.data.shape[0]

    def rows(self) -> FloatArray:
        return self.data

    def with_rows(self, rows: FloatArray) -> VectorAttribute:
        return replace(self, data=np.array(rows, dtype=np.float32))


@dataclass(frozen=True, slots=True, eq=False)
class TensorAttribute:
    """Row-major 3x3 tensors, nine components per element."""

    data: FloatArray

    kind: ClassVar[AttributeKind] = AttributeKind.TENSOR

    @classmethod
    def create(cls, data) -> TensorAttribute:
        return cls(_as_float_array(data, (-1, 9)))

    @property
    def components(self) -> int:
        return 9

    def __len__(self) -> int:
        return self.data.shape[0]

    def rows(self) -> FloatArray:
        return self.data

    def with_rows(self, rows: FloatArray) -> TensorAttribute:
        return replace(self, data=np.array(rows, dtype=np.float32))


Attribute = Union[
    ScalarAttribute, ColorScalarAttribute, VectorAttribute, TensorAttribute
]
AttributeKey = Tuple[str, AttributeLocation]


def copy_attribute(attr: Attribute) -> Attribute:
    return attr.with_rows(attr.rows().copy())


class AttributeStore:
    """
    Attributes keyed by (name, location). Inserting an existing key replaces
    the previous entry.
    """

    def __init__(self, items: Optional[Dict[AttributeKey, Attribute]] = None):
        self._items: Dict[AttributeKey, Attribute] = {}
        if items:
            for (name, location), attr in items.items():
                self.insert(name, location, attr)

    def insert(
        self, name: str, location: AttributeLocation, attr: Attribute
    ) -> None:
        self._items[(name, AttributeLocation(location))] = attr

    def get(
        self, name: str, location: AttributeLocation
    ) -> Optional[Attribute]:
        return self._items.get((name, location))

    def remove(self, name: str, location: AttributeLocation) -> None:
        self._items.pop((name, location), None)

    def items(self) -> Iterator[Tuple[AttributeKey, Attribute]]:
        return iter(list(self._items.items()))

    def at(self, location: AttributeLocation) -> List[Tuple[str, Attribute]]:
        """All (name, attribute) pairs stored at ``location``."""
        return [
            (name, attr)
            for (name, loc), attr in self._items.items()
            if loc == location
        ]

    def copy(self) -> AttributeStore:
        store = AttributeStore()
        for (name, location), attr in self._items.items():
            store.insert(name, location, copy_attribute(attr))
        return store

    def __getitem__(self, key: AttributeKey) -> Attribute:
        return self._items[key]

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[AttributeKey]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
