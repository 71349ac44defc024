#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Sample data loading.
"""

from .film_loader import Film, films_to_columns, load_film_csv, parse_film_row

__all__ = ["Film", "films_to_columns", "load_film_csv", "parse_film_row"]
