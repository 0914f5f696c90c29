"""
GeoStream Adapters Module

Stream transformations shared by operators.
"""

from geostream.adapters.chunk_merger import FeatureCollectionChunkMerger

__all__ = ["FeatureCollectionChunkMerger"]
