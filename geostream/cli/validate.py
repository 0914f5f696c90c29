"""
Validate CLI command

Deserializes and initializes a workflow and prints its result descriptor.
"""

import argparse
import json
import logging
from pathlib import Path

from geostream.core.exceptions import ConfigurationError, DeserializationError, GeoStreamError
from geostream.core.result_descriptor import result_descriptor_from_dict
from geostream.engine.context import DatasetMetaData, InMemoryExecutionContext
from geostream.engine.operator import Operator
from geostream.engine.registry import operator_from_json
from geostream.mock.dataset_source import MockDatasetDataSourceLoadingInfo

logger = logging.getLogger(__name__)


def load_workflow(path: str) -> Operator:
    """
    Read an operator graph from a JSON file

    Raises:
        OSError: If the file cannot be read
        DeserializationError: If the file is not a valid workflow
    """
    text = Path(path).read_text(encoding="utf-8")
    return operator_from_json(text)


def load_datasets(path: str | None) -> InMemoryExecutionContext:
    """
    Build the execution context from a dataset file

    The file maps dataset ids to mock datasets::

        {"cities": {"points": [[1.0, 2.0]], "resultDescriptor": {"type": "vector", ...}}}

    Without a file the context holds no datasets.

    Raises:
        ConfigurationError: If the file cannot be read
        DeserializationError: If an entry is malformed
    """
    context = InMemoryExecutionContext()
    if path is None:
        return context

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read datasets: {e}") from e
    except json.JSONDecodeError as e:
        raise DeserializationError(f"Invalid dataset file: {e}") from e
    if not isinstance(data, dict):
        raise DeserializationError("Dataset file must map dataset ids to datasets")

    for dataset_id, entry in data.items():
        try:
            loading_info = MockDatasetDataSourceLoadingInfo(entry["points"])
            result_descriptor = result_descriptor_from_dict(entry["resultDescriptor"])
        except (AttributeError, KeyError, TypeError, ValueError, GeoStreamError) as e:
            raise DeserializationError(f"Invalid dataset {dataset_id!r}: {e}") from e
        context.add_meta_data(dataset_id, DatasetMetaData(loading_info, result_descriptor))

    logger.debug("Loaded %d datasets from %s", len(data), path)
    return context


def run_validate(args: argparse.Namespace) -> int:
    """Run the validate command"""
    try:
        operator = load_workflow(args.workflow)
        initialized = operator.initialize(load_datasets(args.datasets))
    except OSError as e:
        print(f"Error: Cannot read workflow: {e}")
        return 1
    except GeoStreamError as e:
        print(f"Error: {type(e).__name__}: {e}")
        return 1

    logger.debug("Workflow %s is valid", args.workflow)
    print(json.dumps(initialized.result_descriptor().to_dict(), indent=2))
    return 0
