"""
Result descriptors

Static type information about the data an operator produces. Descriptors
are computed during initialization, before any data is touched.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

import numpy as np
import pyarrow as pa

from geostream.core.exceptions import DeserializationError, ValidationError

DEFAULT_SPATIAL_REFERENCE = "EPSG:4326"


class FeatureDataType(str, Enum):
    """Type of a vector data column"""

    CATEGORY = "category"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"

    @property
    def arrow_type(self) -> pa.DataType:
        return _FEATURE_ARROW_TYPES[self]

    @classmethod
    def from_arrow_type(cls, arrow_type: pa.DataType) -> "FeatureDataType":
        for data_type, candidate in _FEATURE_ARROW_TYPES.items():
            if arrow_type.equals(candidate):
                return data_type
        raise ValidationError(f"Unsupported column type: {arrow_type}")

    def is_numeric(self) -> bool:
        return self in (FeatureDataType.INT, FeatureDataType.FLOAT)


_FEATURE_ARROW_TYPES = {
    FeatureDataType.CATEGORY: pa.uint8(),
    FeatureDataType.INT: pa.int64(),
    FeatureDataType.FLOAT: pa.float64(),
    FeatureDataType.TEXT: pa.string(),
}


class VectorDataType(str, Enum):
    """Geometry kind of a feature collection"""

    DATA = "Data"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"


class RasterDataType(str, Enum):
    """Pixel type of a raster"""

    U8 = "U8"
    U16 = "U16"
    U32 = "U32"
    U64 = "U64"
    I8 = "I8"
    I16 = "I16"
    I32 = "I32"
    I64 = "I64"
    F32 = "F32"
    F64 = "F64"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(_RASTER_NUMPY_TYPES[self])

    @classmethod
    def from_numpy_dtype(cls, dtype: Any) -> "RasterDataType":
        dtype = np.dtype(dtype)
        for data_type in cls:
            if data_type.numpy_dtype == dtype:
                return data_type
        raise ValidationError(f"Unsupported pixel type: {dtype}")

    def is_float(self) -> bool:
        return self in (RasterDataType.F32, RasterDataType.F64)

    def is_valid(self, value: float) -> bool:
        """Check if a value is representable in this pixel type"""
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            return False
        if self.is_float():
            if not np.isfinite(value):
                return True
            return bool(abs(value) <= np.finfo(self.numpy_dtype).max)
        if not np.isfinite(value) or float(value) != int(value):
            return False
        info = np.iinfo(self.numpy_dtype)
        return info.min <= int(value) <= info.max


_RASTER_NUMPY_TYPES = {
    RasterDataType.U8: "uint8",
    RasterDataType.U16: "uint16",
    RasterDataType.U32: "uint32",
    RasterDataType.U64: "uint64",
    RasterDataType.I8: "int8",
    RasterDataType.I16: "int16",
    RasterDataType.I32: "int32",
    RasterDataType.I64: "int64",
    RasterDataType.F32: "float32",
    RasterDataType.F64: "float64",
}


@dataclass(frozen=True)
class Measurement:
    """
    Semantics of raster values

    kind is one of "unitless", "continuous" or "classification".
    """

    kind: str = "unitless"
    measurement: str | None = None
    unit: str | None = None
    classes: dict[int, str] = field(default_factory=dict)

    @classmethod
    def unitless(cls) -> "Measurement":
        return cls()

    @classmethod
    def continuous(cls, measurement: str, unit: str | None = None) -> "Measurement":
        return cls(kind="continuous", measurement=measurement, unit=unit)

    @classmethod
    def classification(cls, measurement: str, classes: dict[int, str]) -> "Measurement":
        return cls(kind="classification", measurement=measurement, classes=dict(classes))

    def to_dict(self) -> dict[str, Any]:
        if self.kind == "continuous":
            return {"type": "continuous", "measurement": self.measurement, "unit": self.unit}
        if self.kind == "classification":
            return {
                "type": "classification",
                "measurement": self.measurement,
                "classes": {str(k): v for k, v in self.classes.items()},
            }
        return {"type": "unitless"}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Measurement":
        kind = data.get("type", "unitless")
        if kind == "unitless":
            return cls.unitless()
        if kind == "continuous":
            return cls.continuous(data["measurement"], data.get("unit"))
        if kind == "classification":
            classes = {int(k): v for k, v in data.get("classes", {}).items()}
            return cls.classification(data["measurement"], classes)
        raise DeserializationError(f"Unknown measurement type: {kind!r}")


@dataclass(frozen=True)
class VectorResultDescriptor:
    """
    Describes the output of a vector operator

    Attributes:
        data_type: Geometry kind of the produced collections
        spatial_reference: Spatial reference tag (None if unreferenced)
        columns: Column name to column type mapping
    """

    data_type: VectorDataType
    spatial_reference: str | None = DEFAULT_SPATIAL_REFERENCE
    columns: dict[str, FeatureDataType] = field(default_factory=dict)

    def column_type(self, column: str) -> FeatureDataType | None:
        return self.columns.get(column)

    def with_columns(self, columns: dict[str, FeatureDataType]) -> "VectorResultDescriptor":
        return replace(self, columns=dict(columns))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "vector",
            "dataType": self.data_type.value,
            "spatialReference": self.spatial_reference,
            "columns": {name: data_type.value for name, data_type in self.columns.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VectorResultDescriptor":
        try:
            return cls(
                data_type=VectorDataType(data["dataType"]),
                spatial_reference=data.get("spatialReference", DEFAULT_SPATIAL_REFERENCE),
                columns={
                    name: FeatureDataType(data_type)
                    for name, data_type in data.get("columns", {}).items()
                },
            )
        except (KeyError, ValueError) as e:
            raise DeserializationError(f"Invalid vector result descriptor: {e}") from e


@dataclass(frozen=True)
class RasterResultDescriptor:
    """
    Describes the output of a raster operator

    Attributes:
        data_type: Pixel type
        spatial_reference: Spatial reference tag (None if unreferenced)
        measurement: Semantics of the pixel values
        no_data_value: Sentinel marking missing pixels, if any
    """

    data_type: RasterDataType
    spatial_reference: str | None = DEFAULT_SPATIAL_REFERENCE
    measurement: Measurement = field(default_factory=Measurement.unitless)
    no_data_value: float | None = None

    def with_no_data_value(self, no_data_value: float | None) -> "RasterResultDescriptor":
        return replace(self, no_data_value=no_data_value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "raster",
            "dataType": self.data_type.value,
            "spatialReference": self.spatial_reference,
            "measurement": self.measurement.to_dict(),
            "noDataValue": self.no_data_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RasterResultDescriptor":
        try:
            return cls(
                data_type=RasterDataType(data["dataType"]),
                spatial_reference=data.get("spatialReference", DEFAULT_SPATIAL_REFERENCE),
                measurement=Measurement.from_dict(data.get("measurement", {})),
                no_data_value=data.get("noDataValue"),
            )
        except (KeyError, ValueError) as e:
            raise DeserializationError(f"Invalid raster result descriptor: {e}") from e


ResultDescriptor = VectorResultDescriptor | RasterResultDescriptor


def result_descriptor_from_dict(data: dict[str, Any]) -> ResultDescriptor:
    """Parse a tagged vector or raster descriptor"""
    kind = data.get("type")
    if kind == "vector":
        return VectorResultDescriptor.from_dict(data)
    if kind == "raster":
        return RasterResultDescriptor.from_dict(data)
    raise DeserializationError(f"Unknown result descriptor type: {kind!r}")
