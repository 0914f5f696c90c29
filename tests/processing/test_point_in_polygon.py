"""
Tests for PointInPolygonFilter
"""

import pytest
from shapely.geometry import Polygon

from geostream.collections import MultiPointCollection, MultiPolygonCollection
from geostream.core.exceptions import UnsupportedVariantError
from geostream.core.result_descriptor import VectorDataType
from geostream.engine import operator_from_dict
from geostream.mock import MockFeatureCollectionSource
from geostream.processing import PointInPolygonFilter, PointInPolygonFilterSource


def build_filter(points, polygons):
    return PointInPolygonFilter(
        sources=PointInPolygonFilterSource(
            points=MockFeatureCollectionSource.multiple(points),
            polygons=MockFeatureCollectionSource.multiple(polygons),
        )
    )


async def run_query(operator, execution_context, query_rectangle, query_context):
    typed = operator.initialize(execution_context).query_processor()
    return [chunk async for chunk in typed.processor.vector_query(query_rectangle, query_context)]


class TestPointInPolygonFilter:
    """Test point in polygon filtering"""

    @pytest.mark.anyio
    async def test_keeps_points_inside(
        self, points, polygons, execution_context, query_rectangle, query_context
    ):
        chunks = await run_query(
            build_filter([points], [polygons]), execution_context, query_rectangle, query_context
        )
        assert len(chunks) == 1
        assert chunks[0].data("bar") == [1, 2]

    @pytest.mark.anyio
    async def test_boundary_and_multi_points(
        self, polygons, execution_context, query_rectangle, query_context
    ):
        candidates = MultiPointCollection.from_data(
            geometries=[[(0.5, 1.0)], [(10.0, 10.0), (1.0, 1.0)], [(10.0, 10.0)]],
            data={"id": [0, 1, 2]},
        )
        chunks = await run_query(
            build_filter([candidates], [polygons]),
            execution_context,
            query_rectangle,
            query_context,
        )
        assert chunks[0].data("id") == [0, 1]

    @pytest.mark.anyio
    async def test_polygons_from_several_chunks(
        self, points, polygons, execution_context, query_rectangle, query_context
    ):
        far = MultiPolygonCollection.from_data(
            geometries=[Polygon([(2.9, 3.0), (3.1, 3.0), (3.1, 3.2), (2.9, 3.2)])],
            data={"name": ["far"]},
        )
        chunks = await run_query(
            build_filter([points], [polygons, far]),
            execution_context,
            query_rectangle,
            query_context,
        )
        assert chunks[0].data("bar") == [1, 2, 3]

    @pytest.mark.anyio
    async def test_order_follows_points(
        self, points, polygons, execution_context, query_rectangle, query_context
    ):
        reversed_points = points.filter([False, False, True, False]).append(
            points.filter([False, True, False, False])
        )
        chunks = await run_query(
            build_filter([reversed_points, points], [polygons]),
            execution_context,
            query_rectangle,
            query_context,
        )
        assert chunks[0].data("bar") == [2, 1, 1, 2]

    @pytest.mark.anyio
    async def test_without_polygons(
        self, points, polygons, execution_context, query_rectangle, query_context
    ):
        no_polygons = polygons.filter([False])
        chunks = await run_query(
            build_filter([points], [no_polygons]),
            execution_context,
            query_rectangle,
            query_context,
        )
        assert len(chunks) == 1
        assert chunks[0].is_empty()

    def test_result_descriptor_from_points(self, points, polygons, execution_context):
        initialized = build_filter([points], [polygons]).initialize(execution_context)
        descriptor = initialized.result_descriptor()
        assert descriptor.data_type == VectorDataType.MULTI_POINT
        assert set(descriptor.columns) == {"foo", "bar"}

    def test_wrong_variants_rejected(self, points, polygons, execution_context):
        swapped = build_filter([polygons], [points]).initialize(execution_context)
        with pytest.raises(UnsupportedVariantError):
            swapped.query_processor()

    def test_round_trip(self, points, polygons):
        operator = build_filter([points], [polygons])
        data = operator.to_dict()
        assert set(data["sources"]) == {"points", "polygons"}
        assert "params" in data
        assert operator_from_dict(data) == operator
