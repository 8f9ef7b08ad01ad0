# -*- coding: utf-8 -*-
"""
Consistency checks and lookups for web reference datasets.
Covers JavaScript built-ins, HTML elements and CSS properties.
"""

from .schema import load_schema, available_datasets, SchemaError, UnknownDatasetError
from .store import Loader, Store, DataFileNotFoundError, DataParseError
from .query import QueryFacade, NotInitializedError
from .contracts import ConsistencyValidator, ValidationReport
from .suggest import suggest, SuggestConfig

__version__ = "0.1.0"

__all__ = [
    "load_schema", "available_datasets", "SchemaError", "UnknownDatasetError",
    "Loader", "Store", "DataFileNotFoundError", "DataParseError",
    "QueryFacade", "NotInitializedError",
    "ConsistencyValidator", "ValidationReport",
    "suggest", "SuggestConfig",
]
