"""
Initialized operators

An initialized operator is an operator bound to its sources: its children are
initialized, its result descriptor is known and its parameters are validated.
It never changes after creation and only builds query processors.
"""

from geostream.core.result_descriptor import RasterResultDescriptor, VectorResultDescriptor
from geostream.engine.processor import TypedRasterQueryProcessor, TypedVectorQueryProcessor


class InitializedOperator:
    """Base class for initialized operators"""

    def __init__(self, result_descriptor):
        self._result_descriptor = result_descriptor

    def result_descriptor(self):
        """Descriptor of the data this operator produces"""
        return self._result_descriptor

    def query_processor(self):
        """
        Build the executable processor

        Performs no I/O. Fails only if a variant combination is unsupported.

        Raises:
            UnsupportedVariantError: If a source variant is not supported
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement query_processor()")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._result_descriptor!r})"


class InitializedVectorOperator(InitializedOperator):
    def __init__(self, result_descriptor: VectorResultDescriptor):
        super().__init__(result_descriptor)

    def result_descriptor(self) -> VectorResultDescriptor:
        return self._result_descriptor

    def query_processor(self) -> TypedVectorQueryProcessor:
        raise NotImplementedError(f"{self.__class__.__name__} must implement query_processor()")


class InitializedRasterOperator(InitializedOperator):
    def __init__(self, result_descriptor: RasterResultDescriptor):
        super().__init__(result_descriptor)

    def result_descriptor(self) -> RasterResultDescriptor:
        return self._result_descriptor

    def query_processor(self) -> TypedRasterQueryProcessor:
        raise NotImplementedError(f"{self.__class__.__name__} must implement query_processor()")
