#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Film CSV loader.

Each row holds `id, title, year, vector` where vector is a bracketed,
comma separated list of floats, e.g. `"[0.1, 0.2, ...]"`. Rows that do not
parse are dropped; loading is best effort.
"""

import csv
import math
import os
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from milvus_demo.utils.logger import get_logger
from milvus_demo.vectordb.columns import Column, INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN, generate_column_data
from milvus_demo.vectordb.schema import film_fields

logger = get_logger("milvus_demo.data.film_loader")

DEFAULT_DIMENSION = 8
DEFAULT_TITLE_MAX_LENGTH = 512
FLOAT32_MAX = float(np.finfo(np.float32).max)

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class Film:
    """One film record parsed from the CSV file."""
    id: int
    title: str
    year: int
    vector: Tuple[float, ...]


def _parse_int(text: str, low: int, high: int) -> Optional[int]:
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if not low <= value <= high:
        return None
    return value


def _parse_float32(text: str) -> Optional[float]:
    if not _FLOAT_PATTERN.fullmatch(text):
        return None
    value = float(text)
    # values beyond float32 range would become inf
    if not math.isfinite(value) or abs(value) > FLOAT32_MAX:
        return None
    return float(np.float32(value))


def parse_vector(text: str, dimension: int = DEFAULT_DIMENSION) -> Optional[Tuple[float, ...]]:
    """Parse `[a, b, ...]` into exactly `dimension` float32 values, or None."""
    parts = text.replace("[", "").replace("]", "").split(",")
    if len(parts) != dimension:
        return None

    vector = []
    for part in parts:
        value = _parse_float32(part.strip())
        if value is None:
            return None
        vector.append(value)
    return tuple(vector)


def parse_film_row(row: Sequence[str], dimension: int = DEFAULT_DIMENSION,
                   title_max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> Optional[Film]:
    """
    Parse one CSV row.

    Args:
        row: CSV fields; only the first four are used.
        dimension: Required vector length.
        title_max_length: Largest title size in UTF-8 bytes the VARCHAR field accepts.

    Returns:
        Film, or None when the row is malformed.
    """
    if len(row) < 4:
        return None

    film_id = _parse_int(row[0], INT64_MIN, INT64_MAX)
    if film_id is None:
        return None

    if len(row[1].encode('utf-8')) > title_max_length:
        return None

    year = _parse_int(row[2], INT32_MIN, INT32_MAX)
    if year is None:
        return None

    vector = parse_vector(row[3], dimension)
    if vector is None:
        return None

    return Film(id=film_id, title=row[1], year=year, vector=vector)


def load_film_csv(csv_path: str, dimension: int = DEFAULT_DIMENSION,
                  title_max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> List[Film]:
    """
    Load every well-formed film from a CSV file.

    Args:
        csv_path: Path to the CSV file.
        dimension: Required vector length.
        title_max_length: Largest title size in UTF-8 bytes; longer rows are skipped.

    Returns:
        List[Film]: films in file order. Malformed rows are skipped silently.
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Film CSV file not found: {csv_path}")

    films = []
    skipped = 0
    with open(csv_path, 'r', encoding='utf-8-sig', newline='') as f:
        for row in csv.reader(f):
            film = parse_film_row(row, dimension, title_max_length)
            if film is None:
                skipped += 1
                continue
            films.append(film)

    logger.debug(f"Loaded {len(films)} films from {csv_path}, skipped {skipped} rows")
    return films


def films_to_columns(films: Sequence[Film], config: Any) -> List[Column]:
    """Group films into one column per field, in collection schema order."""
    (id_name, id_type), (title_name, title_type), (year_name, year_type), (vector_name, vector_type) = \
        film_fields(config)

    return [
        generate_column_data(id_name, id_type, [film.id for film in films]),
        generate_column_data(title_name, title_type, [film.title for film in films]),
        generate_column_data(year_name, year_type, [film.year for film in films]),
        generate_column_data(vector_name, vector_type, [list(film.vector) for film in films]),
    ]
