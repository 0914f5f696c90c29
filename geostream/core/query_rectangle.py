"""
Query rectangle

The spatio-temporal window and resolution of a single query.
"""

from dataclasses import dataclass, field
from typing import Any

from geostream.core.exceptions import ValidationError
from geostream.core.primitives import BoundingBox2D, SpatialResolution, TimeInterval


@dataclass(frozen=True)
class QueryRectangle:
    """
    Spatio-temporal query window

    Attributes:
        bbox: Spatial bounds of the query
        time_interval: Half-open time interval of the query
        spatial_resolution: Requested pixel size

    Raises:
        ValidationError: If any component is malformed

    Examples:
        >>> rect = QueryRectangle(
        ...     bbox=BoundingBox2D((0.0, 0.0), (4.0, 4.0)),
        ...     time_interval=TimeInterval.default(),
        ...     spatial_resolution=SpatialResolution.zero_point_one(),
        ... )
    """

    bbox: BoundingBox2D
    time_interval: TimeInterval = field(default_factory=TimeInterval.default)
    spatial_resolution: SpatialResolution = field(default_factory=SpatialResolution.one)

    def __post_init__(self):
        if not isinstance(self.bbox, BoundingBox2D):
            try:
                object.__setattr__(self, "bbox", BoundingBox2D.from_tuple(tuple(self.bbox)))
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid bounding box: {self.bbox!r}") from e
        if not isinstance(self.time_interval, TimeInterval):
            try:
                object.__setattr__(
                    self, "time_interval", TimeInterval.from_value(self.time_interval)
                )
            except (TypeError, ValueError, KeyError) as e:
                raise ValidationError(f"Invalid time interval: {self.time_interval!r}") from e
        if not isinstance(self.spatial_resolution, SpatialResolution):
            try:
                object.__setattr__(
                    self,
                    "spatial_resolution",
                    SpatialResolution.from_value(self.spatial_resolution),
                )
            except (TypeError, ValueError, KeyError) as e:
                raise ValidationError(
                    f"Invalid spatial resolution: {self.spatial_resolution!r}"
                ) from e

    def to_dict(self) -> dict[str, Any]:
        return {
            "bbox": self.bbox.to_dict(),
            "timeInterval": self.time_interval.to_list(),
            "spatialResolution": self.spatial_resolution.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QueryRectangle":
        try:
            bbox = BoundingBox2D.from_dict(data["bbox"])
        except KeyError as e:
            raise ValidationError(f"Missing query rectangle field: {e}") from e
        return cls(
            bbox=bbox,
            time_interval=TimeInterval.from_value(
                data.get("timeInterval", TimeInterval.default())
            ),
            spatial_resolution=SpatialResolution.from_value(
                data.get("spatialResolution", SpatialResolution.one())
            ),
        )
