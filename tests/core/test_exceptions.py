"""
Tests for exceptions
"""

import pytest

from geostream.core.exceptions import (
    BindingError,
    ColumnNotFoundError,
    ConfigurationError,
    DeserializationError,
    FeatureCollectionError,
    GeoStreamError,
    InvalidTypeError,
    QueryError,
    UnknownDatasetError,
    UnknownOperatorError,
    UnsupportedVariantError,
    ValidationError,
)


class TestExceptions:
    """Test exception hierarchy"""

    def test_base_exception(self):
        with pytest.raises(GeoStreamError):
            raise GeoStreamError("Test error")

    @pytest.mark.parametrize(
        "error, parent",
        [
            (ValidationError("bad value"), GeoStreamError),
            (DeserializationError("bad json"), GeoStreamError),
            (UnknownOperatorError("Foo"), DeserializationError),
            (BindingError("cannot bind"), GeoStreamError),
            (UnknownDatasetError("points"), BindingError),
            (ColumnNotFoundError("foo"), BindingError),
            (InvalidTypeError("int", "text"), BindingError),
            (UnsupportedVariantError("Op", "Data"), BindingError),
            (ConfigurationError("no no-data"), BindingError),
            (QueryError("chunk failed"), GeoStreamError),
            (FeatureCollectionError("bad mask"), QueryError),
        ],
    )
    def test_hierarchy(self, error, parent):
        with pytest.raises(parent):
            raise error

    def test_binding_and_query_errors_are_distinct(self):
        assert not issubclass(BindingError, QueryError)
        assert not issubclass(QueryError, BindingError)

    def test_exception_attributes(self):
        error = UnknownOperatorError("Foo", "vector")
        assert error.type_name == "Foo"
        assert "vector" in str(error)

        error = InvalidTypeError(expected="float", found="category")
        assert (error.expected, error.found) == ("float", "category")

        error = UnsupportedVariantError("PointInPolygonFilter", "Data", ["MultiPoint"])
        assert error.supported == ["MultiPoint"]
        assert "MultiPoint" in str(error)

        assert UnknownDatasetError("points").dataset_id == "points"
        assert ColumnNotFoundError("foo").column == "foo"

    def test_exception_messages(self):
        msg = "Custom error message"

        try:
            raise ConfigurationError(msg)
        except ConfigurationError as e:
            assert str(e) == msg
