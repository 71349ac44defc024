#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Collection schema and index parameters for the film collection.
"""

from typing import Any, Dict, List, Tuple

from pymilvus import CollectionSchema, DataType, FieldSchema

MAX_NLIST = 65536


def film_fields(config: Any) -> List[Tuple[str, DataType]]:
    """(name, dtype) pairs of the film collection in insert order."""
    names = config.schema
    return [
        (names['id_field'], DataType.INT64),
        (names['title_field'], DataType.VARCHAR),
        (names['year_field'], DataType.INT32),
        (names['vector_field'], DataType.FLOAT_VECTOR),
    ]


def build_film_schema(config: Any) -> CollectionSchema:
    names = config.schema
    fields = [
        FieldSchema(name=names['id_field'], dtype=DataType.INT64, is_primary=True, auto_id=False),
        FieldSchema(name=names['title_field'], dtype=DataType.VARCHAR, max_length=int(names['title_max_length'])),
        FieldSchema(name=names['year_field'], dtype=DataType.INT32),
        FieldSchema(name=names['vector_field'], dtype=DataType.FLOAT_VECTOR, dim=config.dimension),
    ]
    return CollectionSchema(fields=fields, description=config.milvus.get('description', ""))


def ivf_flat_index(metric_type: str = "L2", nlist: int = 128) -> Dict[str, Any]:
    if not 1 <= nlist <= MAX_NLIST:
        raise ValueError(f"nlist has to be in range [1, {MAX_NLIST}], got {nlist}")
    return {"index_type": "IVF_FLAT", "metric_type": metric_type, "params": {"nlist": nlist}}


def flat_index(metric_type: str = "L2") -> Dict[str, Any]:
    return {"index_type": "FLAT", "metric_type": metric_type, "params": {}}


def scalar_index(index_type: str = "STL_SORT") -> Dict[str, Any]:
    return {"index_type": index_type}


def vector_index(config: Any) -> Dict[str, Any]:
    """Vector index parameters from the milvus config section."""
    milvus = config.milvus
    index_type = milvus['index_type'].upper()
    if index_type == "IVF_FLAT":
        return ivf_flat_index(milvus['metric_type'], int(milvus['nlist']))
    if index_type == "FLAT":
        return flat_index(milvus['metric_type'])
    raise ValueError(f"unsupported index type: {milvus['index_type']}")


def search_params(index_type: str, metric_type: str = "L2", nprobe: int = 16) -> Dict[str, Any]:
    if index_type.upper() == "IVF_FLAT":
        return {"metric_type": metric_type, "params": {"nprobe": nprobe}}
    return {"metric_type": metric_type, "params": {}}
