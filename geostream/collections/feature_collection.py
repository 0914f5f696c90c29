"""
Feature collections

Arrow-backed, immutable batches of vector features. Each collection holds
one geometry kind (or none, for plain data), a half-open time interval per
feature and any number of typed data columns.

Arrow layout:
    - __geometry: binary - WKB encoded geometry (absent for DataCollection)
    - __time_start: int64 - Feature validity start in epoch milliseconds
    - __time_end: int64 - Feature validity end in epoch milliseconds
    - <column>: uint8 | int64 | float64 | string - Data columns
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

import numpy as np
import pyarrow as pa
import pyarrow.compute as pc
import shapely
from shapely.geometry import (
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from geostream.core.exceptions import FeatureCollectionError, ValidationError
from geostream.core.primitives import TimeInterval
from geostream.core.result_descriptor import FeatureDataType, VectorDataType

GEOMETRY_COLUMN = "__geometry"
TIME_START_COLUMN = "__time_start"
TIME_END_COLUMN = "__time_end"
RESERVED_COLUMNS = frozenset({GEOMETRY_COLUMN, TIME_START_COLUMN, TIME_END_COLUMN})


@dataclass(frozen=True)
class FeatureData:
    """
    Values of one data column with an explicit type

    Examples:
        >>> FeatureData.float([0.0, 1.0, None])
        >>> FeatureData(FeatureDataType.CATEGORY, [0, 1, 1])
    """

    data_type: FeatureDataType
    values: list

    @classmethod
    def int(cls, values: Iterable) -> "FeatureData":
        return cls(FeatureDataType.INT, list(values))

    @classmethod
    def float(cls, values: Iterable) -> "FeatureData":
        return cls(FeatureDataType.FLOAT, list(values))

    @classmethod
    def text(cls, values: Iterable) -> "FeatureData":
        return cls(FeatureDataType.TEXT, list(values))

    @classmethod
    def category(cls, values: Iterable) -> "FeatureData":
        return cls(FeatureDataType.CATEGORY, list(values))

    @classmethod
    def infer(cls, values: Iterable) -> "FeatureData":
        """Infer the column type from Python values (None marks nulls)"""
        values = list(values)
        present = [v for v in values if v is not None]
        if not present:
            raise ValidationError("Cannot infer the type of a column without values")
        if all(isinstance(v, str) for v in present):
            return cls.text(values)
        if any(isinstance(v, bool) for v in present):
            raise ValidationError("Boolean columns are not supported")
        if all(isinstance(v, (int, np.integer)) for v in present):
            return cls.int(values)
        if all(isinstance(v, (int, float, np.number)) for v in present):
            return cls.float(values)
        raise ValidationError(f"Cannot infer column type from values: {present[:3]!r}")

    def to_arrow(self) -> pa.Array:
        try:
            return pa.array(self.values, type=self.data_type.arrow_type)
        except (pa.ArrowInvalid, pa.ArrowTypeError, OverflowError) as e:
            raise ValidationError(
                f"Values do not fit column type {self.data_type.value}: {e}"
            ) from e


class FeatureCollection:
    """
    Base class for feature collections

    Subclasses fix the geometry kind. Instances never change; every
    operation returns a new collection.

    Attributes:
        table: Underlying Arrow table

    Examples:
        >>> collection = MultiPointCollection.from_data(
        ...     geometries=[(0.0, 0.1), (1.0, 1.1)],
        ...     time_intervals=[TimeInterval(0, 1)] * 2,
        ...     data={"foo": FeatureData.float([0.0, 1.0])},
        ... )
        >>> len(collection)
        2
        >>> collection.column_type("foo")
        <FeatureDataType.FLOAT: 'float'>
    """

    vector_data_type: ClassVar[VectorDataType]
    has_geometry: ClassVar[bool] = True

    def __init__(self, table: pa.Table):
        missing = {TIME_START_COLUMN, TIME_END_COLUMN} - set(table.column_names)
        if self.has_geometry and GEOMETRY_COLUMN not in table.column_names:
            missing.add(GEOMETRY_COLUMN)
        if missing:
            raise FeatureCollectionError(f"Missing reserved columns: {sorted(missing)}")
        self.table = table

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def schema(cls, columns: dict[str, FeatureDataType] | None = None) -> pa.Schema:
        """Arrow schema for this collection type and the given data columns"""
        fields = []
        if cls.has_geometry:
            fields.append(pa.field(GEOMETRY_COLUMN, pa.binary(), nullable=False))
        fields.append(pa.field(TIME_START_COLUMN, pa.int64(), nullable=False))
        fields.append(pa.field(TIME_END_COLUMN, pa.int64(), nullable=False))
        for name, data_type in (columns or {}).items():
            if name in RESERVED_COLUMNS:
                raise ValidationError(f"Column name is reserved: {name!r}")
            fields.append(pa.field(name, data_type.arrow_type))
        return pa.schema(fields)

    @classmethod
    def empty(cls, columns: dict[str, FeatureDataType] | None = None) -> "FeatureCollection":
        return cls(cls.schema(columns).empty_table())

    @classmethod
    def from_data(
        cls,
        geometries: Sequence[Any] | None = None,
        time_intervals: Sequence[TimeInterval] | None = None,
        data: dict[str, FeatureData | Sequence[Any]] | None = None,
    ) -> "FeatureCollection":
        """
        Build a collection from Python values

        Args:
            geometries: Shapely geometries or coordinate lists (ignored for DataCollection)
            time_intervals: One interval per feature (default: all valid time)
            data: Column name to FeatureData (or plain values, type inferred)

        Returns:
            New collection

        Raises:
            ValidationError: If lengths differ or values do not fit their types
        """
        data = {
            name: values if isinstance(values, FeatureData) else FeatureData.infer(values)
            for name, values in (data or {}).items()
        }

        if cls.has_geometry:
            if geometries is None:
                raise ValidationError(f"{cls.__name__} requires geometries")
            try:
                encoded = [cls._coerce_geometry(g) for g in geometries]
            except (TypeError, ValueError, GEOSException) as e:
                raise ValidationError(f"Invalid {cls.vector_data_type.value} geometry: {e}") from e
            num_features = len(encoded)
        elif geometries:
            raise ValidationError("DataCollection does not accept geometries")
        elif time_intervals is not None:
            num_features = len(time_intervals)
        elif data:
            num_features = len(next(iter(data.values())).values)
        else:
            num_features = 0

        if time_intervals is None:
            time_intervals = [TimeInterval.default()] * num_features
        time_intervals = [TimeInterval.from_value(t) for t in time_intervals]

        if len(time_intervals) != num_features:
            raise ValidationError(
                f"Expected {num_features} time intervals, got {len(time_intervals)}"
            )
        for name, column in data.items():
            if len(column.values) != num_features:
                raise ValidationError(
                    f"Column {name!r} has {len(column.values)} values, expected {num_features}"
                )

        schema = cls.schema({name: column.data_type for name, column in data.items()})
        arrays = []
        if cls.has_geometry:
            wkb = shapely.to_wkb(np.array(encoded, dtype=object)) if encoded else []
            arrays.append(pa.array(list(wkb), type=pa.binary()))
        arrays.append(pa.array([t.start for t in time_intervals], type=pa.int64()))
        arrays.append(pa.array([t.end for t in time_intervals], type=pa.int64()))
        arrays.extend(column.to_arrow() for column in data.values())

        return cls(pa.Table.from_arrays(arrays, schema=schema))

    @classmethod
    def _coerce_geometry(cls, geometry: Any) -> BaseGeometry:
        raise NotImplementedError(f"{cls.__name__} must implement _coerce_geometry()")

    def _with_table(self, table: pa.Table) -> "FeatureCollection":
        return type(self)(table)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return self.table.num_rows

    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def column_names(self) -> list[str]:
        return [name for name in self.table.column_names if name not in RESERVED_COLUMNS]

    def column_types(self) -> dict[str, FeatureDataType]:
        return {
            f.name: FeatureDataType.from_arrow_type(f.type)
            for f in self.table.schema
            if f.name not in RESERVED_COLUMNS
        }

    def column_type(self, column: str) -> FeatureDataType:
        """
        Type of a data column

        Raises:
            FeatureCollectionError: If the column does not exist
        """
        if column in RESERVED_COLUMNS or column not in self.table.column_names:
            raise FeatureCollectionError(f"Column does not exist: {column!r}")
        return FeatureDataType.from_arrow_type(self.table.schema.field(column).type)

    def data(self, column: str) -> list:
        self.column_type(column)
        return self.table.column(column).to_pylist()

    def time_intervals(self) -> list[TimeInterval]:
        starts = self.table.column(TIME_START_COLUMN).to_pylist()
        ends = self.table.column(TIME_END_COLUMN).to_pylist()
        return [TimeInterval(start, end) for start, end in zip(starts, ends)]

    def geometries(self) -> list[BaseGeometry]:
        if not self.has_geometry:
            raise FeatureCollectionError("DataCollection has no geometries")
        wkb = self.table.column(GEOMETRY_COLUMN).to_pylist()
        if not wkb:
            return []
        return list(shapely.from_wkb(np.array(wkb, dtype=object)))

    def byte_size(self) -> int:
        """Estimated in-memory size, the sum of all Arrow buffers"""
        return self.table.nbytes

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def filter(self, mask: Sequence[bool] | np.ndarray | pa.Array) -> "FeatureCollection":
        """
        Keep the features where mask is True

        Raises:
            FeatureCollectionError: If the mask length does not match
        """
        if not isinstance(mask, (pa.Array, pa.ChunkedArray)):
            mask = pa.array(np.asarray(mask, dtype=bool))
        if len(mask) != len(self):
            raise FeatureCollectionError(
                f"Mask length {len(mask)} does not match collection length {len(self)}"
            )
        return self._with_table(self.table.filter(mask))

    def append(self, other: "FeatureCollection") -> "FeatureCollection":
        """
        Concatenate another collection of the same type and schema

        Raises:
            FeatureCollectionError: If the collections are incompatible
        """
        if type(other) is not type(self):
            raise FeatureCollectionError(
                f"Cannot append {type(other).__name__} to {type(self).__name__}"
            )
        if not self.table.schema.equals(other.table.schema):
            raise FeatureCollectionError(
                f"Column schemas differ: {self.column_types()} vs {other.column_types()}"
            )
        return self._with_table(pa.concat_tables([self.table, other.table]))

    @classmethod
    def concat(cls, collections: Sequence["FeatureCollection"]) -> "FeatureCollection":
        """Concatenate collections in order"""
        if not collections:
            raise FeatureCollectionError("Cannot concatenate an empty list of collections")
        result = collections[0]
        for collection in collections[1:]:
            result = result.append(collection)
        return result

    def column_range_filter(
        self,
        column: str,
        ranges: Sequence[tuple[Any, Any]],
        keep_nulls: bool,
    ) -> "FeatureCollection":
        """
        Keep features whose column value lies inside any inclusive range

        Args:
            column: Data column to filter on
            ranges: (start, end) tuples already converted to the column's type
            keep_nulls: Also keep features with a null value

        Returns:
            Filtered collection (possibly empty)

        Raises:
            FeatureCollectionError: If the column does not exist
        """
        self.column_type(column)
        values = self.table.column(column)

        mask = pc.is_null(values) if keep_nulls else None
        for start, end in ranges:
            in_range = pc.and_(pc.greater_equal(values, start), pc.less_equal(values, end))
            in_range = pc.fill_null(in_range, False)
            mask = in_range if mask is None else pc.or_(mask, in_range)

        if mask is None:
            return self.filter(np.zeros(len(self), dtype=bool))
        return self._with_table(self.table.filter(mask))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Plain representation with WKT geometries"""
        result: dict[str, Any] = {"type": self.vector_data_type.value}
        if self.has_geometry:
            result["geometries"] = [g.wkt for g in self.geometries()]
        result["timeIntervals"] = [t.to_list() for t in self.time_intervals()]
        result["columns"] = {
            name: {"type": data_type.value, "values": self.data(name)}
            for name, data_type in self.column_types().items()
        }
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeatureCollection":
        collection_type = collection_type_for(VectorDataType(data["type"]))
        if cls is not FeatureCollection and collection_type is not cls:
            raise ValidationError(
                f"Expected {cls.vector_data_type.value} collection, got {data['type']!r}"
            )
        geometries = None
        if collection_type.has_geometry:
            geometries = [shapely.from_wkt(wkt) for wkt in data.get("geometries", [])]
        columns = {
            name: FeatureData(FeatureDataType(column["type"]), list(column["values"]))
            for name, column in data.get("columns", {}).items()
        }
        time_intervals = data.get("timeIntervals")
        if time_intervals is not None:
            time_intervals = [TimeInterval.from_value(t) for t in time_intervals]
        return collection_type.from_data(
            geometries=geometries, time_intervals=time_intervals, data=columns
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.table.equals(other.table)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        columns = ", ".join(f"{k}: {v.value}" for k, v in self.column_types().items())
        return f"{type(self).__name__}(len={len(self)}, columns={{{columns}}})"


class DataCollection(FeatureCollection):
    """Features without geometries"""

    vector_data_type = VectorDataType.DATA
    has_geometry = False


class MultiPointCollection(FeatureCollection):
    """Features with MultiPoint geometries"""

    vector_data_type = VectorDataType.MULTI_POINT

    @classmethod
    def _coerce_geometry(cls, geometry: Any) -> BaseGeometry:
        if isinstance(geometry, MultiPoint):
            return geometry
        if isinstance(geometry, Point):
            return MultiPoint([geometry])
        if isinstance(geometry, BaseGeometry):
            raise ValidationError(f"Expected a point geometry, got {geometry.geom_type}")
        coordinates = list(geometry)
        if _is_coordinate(coordinates):
            return MultiPoint([coordinates])
        return MultiPoint(coordinates)


class MultiLineStringCollection(FeatureCollection):
    """Features with MultiLineString geometries"""

    vector_data_type = VectorDataType.MULTI_LINE_STRING

    @classmethod
    def _coerce_geometry(cls, geometry: Any) -> BaseGeometry:
        if isinstance(geometry, MultiLineString):
            return geometry
        if isinstance(geometry, LineString):
            return MultiLineString([geometry])
        if isinstance(geometry, BaseGeometry):
            raise ValidationError(f"Expected a line geometry, got {geometry.geom_type}")
        lines = list(geometry)
        # A single line given as its coordinates
        if lines and all(_is_coordinate(c) for c in lines):
            return MultiLineString([lines])
        return MultiLineString(lines)


class MultiPolygonCollection(FeatureCollection):
    """Features with MultiPolygon geometries"""

    vector_data_type = VectorDataType.MULTI_POLYGON

    @classmethod
    def _coerce_geometry(cls, geometry: Any) -> BaseGeometry:
        if isinstance(geometry, MultiPolygon):
            return geometry
        if isinstance(geometry, Polygon):
            return MultiPolygon([geometry])
        if isinstance(geometry, BaseGeometry):
            raise ValidationError(f"Expected a polygon geometry, got {geometry.geom_type}")
        rings = list(geometry)
        # A single exterior ring given as its coordinates
        if rings and all(_is_coordinate(c) for c in rings):
            return MultiPolygon([Polygon(rings)])
        return MultiPolygon([Polygon(ring) for ring in rings])


_COLLECTION_TYPES: dict[VectorDataType, type[FeatureCollection]] = {
    VectorDataType.DATA: DataCollection,
    VectorDataType.MULTI_POINT: MultiPointCollection,
    VectorDataType.MULTI_LINE_STRING: MultiLineStringCollection,
    VectorDataType.MULTI_POLYGON: MultiPolygonCollection,
}


def collection_type_for(data_type: VectorDataType) -> type[FeatureCollection]:
    """Collection class for a geometry kind"""
    return _COLLECTION_TYPES[VectorDataType(data_type)]


def _is_coordinate(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) in (2, 3)
        and all(isinstance(c, (int, float, np.number)) for c in value)
    )
