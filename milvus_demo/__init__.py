"""Demonstration client for loading film vectors into Milvus and searching them."""

__version__ = "0.1.0"
