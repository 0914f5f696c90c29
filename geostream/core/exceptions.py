"""
GeoStream Exceptions

Exception hierarchy for error handling.

Binding errors are raised while an operator graph is initialized or turned
into query processors. Query errors are raised by individual chunks while a
stream is consumed and terminate that stream.
"""


class GeoStreamError(Exception):
    """Base exception for GeoStream"""

    pass


class ValidationError(GeoStreamError):
    """Value object validation failed"""

    pass


class DeserializationError(GeoStreamError):
    """Operator description could not be parsed"""

    pass


class UnknownOperatorError(DeserializationError):
    """Operator type tag is not registered"""

    def __init__(self, type_name: str, family: str | None = None):
        self.type_name = type_name
        self.family = family
        where = f" {family}" if family else ""
        super().__init__(f"Unknown{where} operator type: {type_name!r}")


class BindingError(GeoStreamError):
    """Operator graph could not be bound to its sources"""

    pass


class UnknownDatasetError(BindingError):
    """Dataset id could not be resolved by the execution context"""

    def __init__(self, dataset_id: str):
        self.dataset_id = dataset_id
        super().__init__(f"Unknown dataset: {dataset_id!r}")


class ColumnNotFoundError(BindingError):
    """Referenced column does not exist in the source"""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Column does not exist: {column!r}")


class InvalidTypeError(BindingError):
    """Requested operation does not fit the type it is applied to"""

    def __init__(self, expected: str, found: str):
        self.expected = expected
        self.found = found
        super().__init__(f"Invalid type: expected {expected}, found {found}")


class UnsupportedVariantError(BindingError):
    """Operator does not support the geometry or pixel type of its source"""

    def __init__(self, operator: str, variant: str, supported: list[str] | None = None):
        self.operator = operator
        self.variant = variant
        self.supported = supported or []
        message = f"{operator} does not support {variant} sources"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)


class ConfigurationError(BindingError):
    """Invalid parameter combination"""

    pass


class QueryError(GeoStreamError):
    """Query execution failed"""

    pass


class FeatureCollectionError(QueryError):
    """Feature collection operation failed"""

    pass
