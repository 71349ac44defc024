#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Milvus vector database client.
A thin facade over the pymilvus ORM that sequences remote calls and wraps
their failures in MilvusClientError.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pymilvus import Collection, CollectionSchema, connections, utility

from milvus_demo.utils.logger import get_logger
from .columns import Column
from .exceptions import ColumnDataError, MilvusClientError

logger = get_logger("milvus_demo.vectordb.milvus_client")


@dataclass
class SearchHit:
    """One entity returned by a similarity search."""
    id: Any
    score: float
    fields: Dict[str, Any] = field(default_factory=dict)


class MilvusClient:
    """
    Milvus vector database client.

    Connects on construction and releases the connection on close(), or on
    leaving a with block.
    """

    def __init__(self,
                 config: Any,
                 host: Optional[str] = None,
                 port: Optional[int] = None,
                 user: Optional[str] = None,
                 password: Optional[str] = None):
        self.config = config
        self.milvus_config = getattr(config, 'milvus', None) or {}

        # explicit arguments, then environment, then the milvus config section
        self.host = host or os.environ.get('MILVUS_HOST') or self.milvus_config.get('host', 'localhost')
        self.port = int(port or os.environ.get('MILVUS_PORT') or self.milvus_config.get('port', 19530))
        self.user = user or os.environ.get('MILVUS_USER') or self.milvus_config.get('user')
        self.password = password or os.environ.get('MILVUS_PASSWORD') or self.milvus_config.get('password')

        self.alias = self.milvus_config.get('alias', 'default')
        self.timeout = self.milvus_config.get('timeout', 30)
        self.shard_num = int(self.milvus_config.get('shard_num', 1))
        self.consistency_level = self.milvus_config.get('consistency_level', 'Strong')

        self._connected = False
        self.connect()

    def __enter__(self) -> "MilvusClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def connect(self) -> None:
        if connections.has_connection(self.alias):
            logger.info(f"Existing connection for alias '{self.alias}' found. Disconnecting first.")
            connections.disconnect(self.alias)

        conn_params = {
            "alias": self.alias,
            "host": self.host,
            "port": str(self.port),
            "timeout": self.timeout,
        }
        if self.user and self.password:
            conn_params["user"] = self.user
            conn_params["password"] = self.password

        logger.info(f"Connecting to Milvus server at {self.host}:{self.port}")
        try:
            connections.connect(**conn_params)
        except Exception as e:
            raise MilvusClientError("failed to connect to milvus server", e) from e

        self._connected = True
        logger.info(f"Connected to Milvus server ({self._get_server_version()})")

    def is_connected(self) -> bool:
        if not self._connected:
            return False
        try:
            utility.get_server_version(using=self.alias)
            return True
        except Exception:
            self._connected = False
            return False

    def _get_server_version(self) -> str:
        try:
            return utility.get_server_version(using=self.alias)
        except Exception as e:
            logger.warning(f"Failed to get server version: {e}")
            return "unknown"

    def close(self) -> None:
        if not self._connected:
            return
        try:
            connections.disconnect(self.alias)
            logger.info("Milvus connection closed.")
        finally:
            self._connected = False

    def _collection(self, name: str) -> Collection:
        return Collection(name, using=self.alias)

    def has_collection(self, name: str) -> bool:
        try:
            return utility.has_collection(name, using=self.alias)
        except Exception as e:
            raise MilvusClientError(f"failed to check whether collection `{name}` exists", e) from e

    def list_collections(self) -> List[str]:
        try:
            return utility.list_collections(using=self.alias)
        except Exception as e:
            raise MilvusClientError("failed to list collections", e) from e

    def _create(self, name: str, schema: CollectionSchema) -> None:
        try:
            Collection(name=name, schema=schema, using=self.alias, shards_num=self.shard_num)
        except Exception as e:
            raise MilvusClientError(f"failed to create collection `{name}`", e) from e
        logger.info(f"Collection `{name}` created")

    def create_collection(self, name: str, schema: CollectionSchema) -> bool:
        """
        Create a collection, or drop it when it already exists.

        An existing collection is dropped and NOT recreated in the same call.
        Use ensure_collection or recreate_collection to state intent explicitly.

        Returns:
            bool: True if the collection was created, False if an existing one was dropped.
        """
        if self.has_collection(name):
            logger.warning(f"Collection `{name}` already exists, dropping it without recreating")
            self.drop(name)
            return False

        self._create(name, schema)
        return True

    def ensure_collection(self, name: str, schema: CollectionSchema) -> bool:
        """Create the collection unless it exists. Never drops. Returns whether it created."""
        if self.has_collection(name):
            logger.info(f"Collection `{name}` already exists, reusing it")
            return False

        self._create(name, schema)
        return True

    def recreate_collection(self, name: str, schema: CollectionSchema) -> None:
        """Drop the collection if present, then create it from schema."""
        if self.has_collection(name):
            self.drop(name)
        self._create(name, schema)

    def insert(self, collection_name: str, partition_name: str, *columns: Column) -> int:
        """
        Insert a columnar batch.

        Args:
            collection_name: Target collection.
            partition_name: Target partition; empty for the default partition.
            *columns: One Column per schema field, in schema order.

        Returns:
            int: number of inserted entities.
        """
        if not columns:
            raise ColumnDataError("no columns to insert")
        lengths = {column.name: len(column) for column in columns}
        if len(set(lengths.values())) != 1:
            raise ColumnDataError(f"column lengths differ: {lengths}")

        data = [column.to_field_data() for column in columns]
        try:
            result = self._collection(collection_name).insert(
                data, partition_name=partition_name or None, timeout=self.timeout)
        except Exception as e:
            raise MilvusClientError(f"failed to insert data into `{collection_name}`", e) from e

        logger.info(f"Inserted {result.insert_count} entities into collection `{collection_name}`")
        return result.insert_count

    def flush(self, collection_name: str) -> None:
        try:
            self._collection(collection_name).flush(timeout=self.timeout)
        except Exception as e:
            raise MilvusClientError("flush data failed", e) from e
        logger.info(f"Flushed data of collection `{collection_name}`")

    def create_index(self, collection_name: str, field_name: str, index_params: Dict[str, Any]) -> None:
        try:
            self._collection(collection_name).create_index(
                field_name=field_name, index_params=index_params, timeout=self.timeout)
        except Exception as e:
            raise MilvusClientError("create index failed", e) from e
        logger.info(f"Created {index_params.get('index_type', 'default')} index on field {field_name} "
                    f"of collection {collection_name}")

    def load_collection(self, collection_name: str) -> None:
        try:
            self._collection(collection_name).load(timeout=self.timeout)
        except Exception as e:
            raise MilvusClientError("load collection failed", e) from e
        logger.info(f"Loaded collection `{collection_name}`")

    def delete(self, collection_name: str, pks: Column) -> int:
        """Delete entities by primary key. Returns the number of deleted entities."""
        expr = f"{pks.name} in {list(pks.values)}"
        try:
            result = self._collection(collection_name).delete(expr, timeout=self.timeout)
        except Exception as e:
            raise MilvusClientError("delete entities failed", e) from e
        logger.info(f"Deleted {result.delete_count} entities from collection `{collection_name}`")
        return result.delete_count

    def drop(self, collection_name: str) -> None:
        try:
            utility.drop_collection(collection_name, using=self.alias)
        except Exception as e:
            raise MilvusClientError("drop collection failed", e) from e
        logger.info(f"Collection `{collection_name}` dropped")

    def count(self, collection_name: str) -> int:
        try:
            return self._collection(collection_name).num_entities
        except Exception as e:
            raise MilvusClientError(f"failed to count entities of `{collection_name}`", e) from e

    def search(self,
               collection_name: str,
               vectors: Sequence[Sequence[float]],
               anns_field: str,
               top_k: int,
               search_params: Dict[str, Any],
               expr: Optional[str] = None,
               output_fields: Optional[List[str]] = None) -> List[List[SearchHit]]:
        """
        Similarity search, one result list per query vector.

        Args:
            collection_name: Collection to search; must be loaded.
            vectors: Query vectors.
            anns_field: Vector field to search on.
            top_k: Maximum number of hits per query vector.
            search_params: metric_type and index specific params.
            expr: Optional boolean filter expression, e.g. "Year > 1990".
            output_fields: Scalar fields to return with each hit.
        """
        output_fields = list(output_fields or [])
        logger.debug(f"Searching `{collection_name}`: top_k={top_k}, expr='{expr}', output_fields={output_fields}")
        try:
            results = self._collection(collection_name).search(
                data=[list(v) for v in vectors],
                anns_field=anns_field,
                param=search_params,
                limit=top_k,
                expr=expr or None,
                output_fields=output_fields,
                consistency_level=self.consistency_level,
                timeout=self.timeout,
            )
        except Exception as e:
            raise MilvusClientError(f"failed to search collection `{collection_name}`", e) from e

        processed = []
        for hits in results:
            processed.append([
                SearchHit(id=hit.id, score=hit.distance,
                          fields={name: hit.entity.get(name) for name in output_fields})
                for hit in hits
            ])
        logger.info(f"Search finished with {sum(len(h) for h in processed)} hits")
        return processed
