#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Exception types raised by the Milvus demo.
"""


class MilvusDemoError(Exception):
    """Base class for errors raised by this package."""
    pass


class MilvusClientError(MilvusDemoError):
    """A call to the Milvus server failed. The SDK error is kept as __cause__."""

    def __init__(self, message: str, cause: Exception = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class ColumnDataError(MilvusDemoError, ValueError):
    """Column values do not fit the declared field."""
    pass


class ColumnTypeMismatchError(ColumnDataError):
    pass


class DimensionMismatchError(ColumnDataError):
    pass


class UnsupportedColumnTypeError(ColumnDataError):
    pass
