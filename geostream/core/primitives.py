"""
Spatio-temporal primitives

Coordinates, bounding boxes, time intervals and spatial resolutions.
All of them validate on construction so that malformed values never reach
a running query.
"""

from dataclasses import dataclass
from typing import Any

from geostream.core.exceptions import ValidationError

# Valid time instants in epoch milliseconds (+/- 262,143 years)
TIME_INSTANCE_MIN = -8_334_632_851_200_001
TIME_INSTANCE_MAX = 8_210_298_412_799_999


@dataclass(frozen=True)
class Coordinate2D:
    """A planar coordinate"""

    x: float
    y: float

    @classmethod
    def from_value(cls, value: Any) -> "Coordinate2D":
        """Build a coordinate from a Coordinate2D, (x, y) pair or {"x", "y"} dict"""
        if isinstance(value, Coordinate2D):
            return value
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]))
        x, y = value
        return cls(float(x), float(y))

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class BoundingBox2D:
    """
    Axis-aligned bounding box

    Attributes:
        lower_left: Minimum corner
        upper_right: Maximum corner

    Raises:
        ValidationError: If the lower left corner exceeds the upper right
            corner on any axis

    Examples:
        >>> bbox = BoundingBox2D((0.0, 0.0), (4.0, 4.0))
        >>> bbox.contains_coordinate(Coordinate2D(1.0, 2.0))
        True
        >>> BoundingBox2D.from_tuple((0.0, 0.0, 10.0, 5.0)).to_tuple()
        (0.0, 0.0, 10.0, 5.0)
    """

    lower_left: Coordinate2D
    upper_right: Coordinate2D

    def __post_init__(self):
        lower_left = Coordinate2D.from_value(self.lower_left)
        upper_right = Coordinate2D.from_value(self.upper_right)
        object.__setattr__(self, "lower_left", lower_left)
        object.__setattr__(self, "upper_right", upper_right)

        if not (lower_left.x <= upper_right.x and lower_left.y <= upper_right.y):
            raise ValidationError(
                f"Invalid bounding box: lower left {lower_left} "
                f"must not exceed upper right {upper_right}"
            )

    @classmethod
    def from_tuple(cls, bounds: tuple[float, float, float, float]) -> "BoundingBox2D":
        """Build from (minx, miny, maxx, maxy)"""
        minx, miny, maxx, maxy = bounds
        return cls(Coordinate2D(minx, miny), Coordinate2D(maxx, maxy))

    def to_tuple(self) -> tuple[float, float, float, float]:
        return (self.lower_left.x, self.lower_left.y, self.upper_right.x, self.upper_right.y)

    def contains_coordinate(self, coordinate: Coordinate2D) -> bool:
        """Check if a coordinate lies inside or on the border of the box"""
        return (
            self.lower_left.x <= coordinate.x <= self.upper_right.x
            and self.lower_left.y <= coordinate.y <= self.upper_right.y
        )

    def intersects_bbox(self, other: "BoundingBox2D") -> bool:
        return not (
            other.upper_right.x < self.lower_left.x
            or other.lower_left.x > self.upper_right.x
            or other.upper_right.y < self.lower_left.y
            or other.lower_left.y > self.upper_right.y
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "lowerLeftCoordinate": self.lower_left.to_dict(),
            "upperRightCoordinate": self.upper_right.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list) -> "BoundingBox2D":
        if isinstance(data, (list, tuple)):
            return cls.from_tuple(tuple(data))
        return cls(data["lowerLeftCoordinate"], data["upperRightCoordinate"])


@dataclass(frozen=True)
class TimeInterval:
    """
    Half-open time interval [start, end) in epoch milliseconds

    An instant is represented as [t, t).

    Raises:
        ValidationError: If start is after end or an instant lies outside
            the valid range
    """

    start: int = TIME_INSTANCE_MIN
    end: int = TIME_INSTANCE_MAX

    def __post_init__(self):
        for instant in (self.start, self.end):
            if not TIME_INSTANCE_MIN <= instant <= TIME_INSTANCE_MAX:
                raise ValidationError(f"Time instance out of range: {instant}")
        if self.start > self.end:
            raise ValidationError(
                f"Invalid time interval: start {self.start} must not be after end {self.end}"
            )

    @classmethod
    def default(cls) -> "TimeInterval":
        """Interval covering all valid time"""
        return cls(TIME_INSTANCE_MIN, TIME_INSTANCE_MAX)

    @classmethod
    def instant(cls, instant: int) -> "TimeInterval":
        return cls(instant, instant)

    def is_instant(self) -> bool:
        return self.start == self.end

    def contains_instant(self, instant: int) -> bool:
        if self.is_instant():
            return instant == self.start
        return self.start <= instant < self.end

    def intersects(self, other: "TimeInterval") -> bool:
        """
        Check for a non-empty overlap

        Instants intersect the intervals that contain them.
        """
        if self.is_instant():
            return other.contains_instant(self.start)
        if other.is_instant():
            return self.contains_instant(other.start)
        return self.start < other.end and other.start < self.end

    def duration_ms(self) -> int:
        return self.end - self.start

    def to_list(self) -> list[int]:
        return [self.start, self.end]

    @classmethod
    def from_value(cls, value: Any) -> "TimeInterval":
        if isinstance(value, TimeInterval):
            return value
        if isinstance(value, dict):
            return cls(int(value["start"]), int(value["end"]))
        start, end = value
        return cls(int(start), int(end))


@dataclass(frozen=True)
class SpatialResolution:
    """Pixel size per axis, strictly positive"""

    x: float
    y: float

    def __post_init__(self):
        if not (self.x > 0 and self.y > 0):
            raise ValidationError(
                f"Spatial resolution must be strictly positive, got ({self.x}, {self.y})"
            )

    @classmethod
    def one(cls) -> "SpatialResolution":
        return cls(1.0, 1.0)

    @classmethod
    def zero_point_one(cls) -> "SpatialResolution":
        return cls(0.1, 0.1)

    @classmethod
    def from_value(cls, value: Any) -> "SpatialResolution":
        if isinstance(value, SpatialResolution):
            return value
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]))
        if isinstance(value, (int, float)):
            return cls(float(value), float(value))
        x, y = value
        return cls(float(x), float(y))

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}
