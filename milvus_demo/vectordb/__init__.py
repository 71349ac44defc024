#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Milvus vector database client module.
Exposes the MilvusClient facade and the column batch helpers.
"""

from .columns import Column, generate_column_data
from .exceptions import (
    ColumnDataError,
    ColumnTypeMismatchError,
    DimensionMismatchError,
    MilvusClientError,
    MilvusDemoError,
    UnsupportedColumnTypeError,
)
from .milvus_client import MilvusClient, SearchHit

__all__ = [
    "Column",
    "generate_column_data",
    "MilvusClient",
    "SearchHit",
    "MilvusDemoError",
    "MilvusClientError",
    "ColumnDataError",
    "ColumnTypeMismatchError",
    "DimensionMismatchError",
    "UnsupportedColumnTypeError",
]
