"""
Run CLI command

Queries a workflow over a rectangle and prints one line per result chunk.
"""

import argparse
import asyncio
import logging

from geostream.cli.validate import load_datasets, load_workflow
from geostream.collections.feature_collection import FeatureCollection
from geostream.core.exceptions import GeoStreamError
from geostream.core.primitives import BoundingBox2D, SpatialResolution, TimeInterval
from geostream.core.query_rectangle import QueryRectangle
from geostream.engine.context import ExecutionContext, StaticQueryContext
from geostream.engine.operator import Operator
from geostream.engine.processor import stream_closing

logger = logging.getLogger(__name__)


def build_query(args: argparse.Namespace) -> QueryRectangle:
    time_interval = TimeInterval(*args.time) if args.time else TimeInterval.default()
    return QueryRectangle(
        bbox=BoundingBox2D.from_tuple(tuple(args.bbox)),
        time_interval=time_interval,
        spatial_resolution=SpatialResolution(*args.resolution),
    )


async def execute(
    operator: Operator,
    query: QueryRectangle,
    ctx: StaticQueryContext,
    context: ExecutionContext,
) -> int:
    """Run the query and print each chunk, returning the number of chunks"""
    initialized = operator.initialize(context)
    typed = initialized.query_processor()
    logger.debug("Running %s (%s) with %r", operator.type_name, typed.data_type.value, ctx)

    count = 0
    async with stream_closing(typed.processor.query(query, ctx)) as stream:
        async for chunk in stream:
            if isinstance(chunk, FeatureCollection):
                print(
                    f"chunk {count}: {typed.data_type.value} "
                    f"rows={len(chunk)} bytes={chunk.byte_size()}"
                )
            else:
                print(
                    f"chunk {count}: {chunk.data_type.value} "
                    f"tile={chunk.tile_position} bytes={chunk.byte_size()}"
                )
            count += 1
    return count


def run_query(args: argparse.Namespace) -> int:
    """Run the run command"""
    try:
        operator = load_workflow(args.workflow)
        context = load_datasets(args.datasets)
        query = build_query(args)
        ctx = StaticQueryContext(args.chunk_byte_size)
        count = asyncio.run(execute(operator, query, ctx, context))
    except OSError as e:
        print(f"Error: Cannot read workflow: {e}")
        return 1
    except GeoStreamError as e:
        print(f"Error: {type(e).__name__}: {e}")
        return 1

    print(f"{count} chunks")
    return 0
