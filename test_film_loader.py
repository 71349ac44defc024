#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Film CSV loader tests
Checks row parsing, the best-effort skipping of malformed rows and the column batch builder.
"""

import os
import sys
import shutil
import tempfile
import unittest
from pathlib import Path

import numpy as np
from pymilvus import DataType

# Add project root to the import path
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

from milvus_demo.data.film_loader import Film, films_to_columns, load_film_csv, parse_film_row, parse_vector
from milvus_demo.utils.config import Config
from milvus_demo.utils.logger import get_logger

logger = get_logger("test_film_loader")

VECTOR_TEXT = "[0.1,0.2,0.3,0.4,0.5,0.6,0.7,0.8]"
EXPECTED_VECTOR = tuple(float(np.float32(x)) for x in (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8))


class TestParseFilmRow(unittest.TestCase):
    """Single row parsing"""

    def test_01_well_formed_row(self):
        film = parse_film_row(["42", "Example", "1995", VECTOR_TEXT])

        self.assertIsNotNone(film)
        self.assertEqual(film.id, 42)
        self.assertEqual(film.title, "Example")
        self.assertEqual(film.year, 1995)
        self.assertEqual(film.vector, EXPECTED_VECTOR)
        self.assertEqual(len(film.vector), 8)

    def test_02_vector_values_are_float32(self):
        film = parse_film_row(["1", "t", "2000", VECTOR_TEXT])
        for value in film.vector:
            self.assertEqual(value, float(np.float32(value)))
        # 0.1 is not exactly representable, so float32 rounding is visible
        self.assertNotEqual(film.vector[0], 0.1)

    def test_03_spaces_inside_vector_are_allowed(self):
        film = parse_film_row(["7", "Spaced", "2001", "[ 0.1, 0.2 ,0.3, 0.4, 0.5, 0.6, 0.7, 0.8 ]"])
        self.assertEqual(film.vector, EXPECTED_VECTOR)

    def test_04_too_few_columns(self):
        self.assertIsNone(parse_film_row(["1", "Title", "1999"]))
        self.assertIsNone(parse_film_row([]))

    def test_05_non_integer_id(self):
        for bad_id in ["abc", "1.5", "", " 1", "1_000"]:
            with self.subTest(bad_id=bad_id):
                self.assertIsNone(parse_film_row([bad_id, "Title", "1999", VECTOR_TEXT]))

    def test_06_non_integer_year(self):
        for bad_year in ["nineteen", "1999.0", ""]:
            with self.subTest(bad_year=bad_year):
                self.assertIsNone(parse_film_row(["1", "Title", bad_year, VECTOR_TEXT]))

    def test_07_year_outside_int32(self):
        self.assertIsNone(parse_film_row(["1", "Title", str(2 ** 31), VECTOR_TEXT]))

    def test_08_id_outside_int64(self):
        self.assertIsNone(parse_film_row([str(2 ** 63), "Title", "1999", VECTOR_TEXT]))
        self.assertIsNotNone(parse_film_row([str(2 ** 63 - 1), "Title", "1999", VECTOR_TEXT]))

    def test_09_wrong_vector_arity(self):
        self.assertIsNone(parse_film_row(["1", "Title", "1999", "[0.1,0.2,0.3,0.4,0.5,0.6,0.7]"]))
        self.assertIsNone(parse_film_row(["1", "Title", "1999", "[0.1,0.2,0.3,0.4,0.5,0.6,0.7,0.8,0.9]"]))

    def test_10_unparsable_vector_component(self):
        self.assertIsNone(parse_film_row(["1", "Title", "1999", "[0.1,0.2,x,0.4,0.5,0.6,0.7,0.8]"]))
        self.assertIsNone(parse_film_row(["1", "Title", "1999", "[0.1,0.2,,0.4,0.5,0.6,0.7,0.8]"]))

    def test_11_float32_overflow(self):
        self.assertIsNone(parse_vector("[1e39,0,0,0,0,0,0,0]"))

    def test_12_custom_dimension(self):
        film = parse_film_row(["3", "Short", "2020", "[1, 2, 3]"], dimension=3)
        self.assertEqual(film.vector, (1.0, 2.0, 3.0))
        self.assertIsNone(parse_film_row(["3", "Short", "2020", "[1, 2, 3]"]))

    def test_13_extra_columns_are_ignored(self):
        film = parse_film_row(["5", "Extra", "2005", VECTOR_TEXT, "ignored"])
        self.assertEqual(film, Film(5, "Extra", 2005, EXPECTED_VECTOR))

    def test_14_non_ascii_digits_rejected(self):
        # Arabic-Indic digits are accepted by int() but are not plain decimal integers
        self.assertIsNone(parse_film_row(["٤٢", "Title", "1999", VECTOR_TEXT]))
        self.assertIsNone(parse_film_row(["1", "Title", "١٩٩٩", VECTOR_TEXT]))
        self.assertIsNone(parse_vector("[١,0,0,0,0,0,0,0]"))

    def test_15_non_finite_vector_components(self):
        for bad in ["nan", "inf", "-inf", "Infinity", "1_0", "1e400"]:
            with self.subTest(bad=bad):
                self.assertIsNone(parse_vector(f"[{bad},0,0,0,0,0,0,0]"))
        self.assertEqual(parse_vector("[1e3,-2.5,.5,3.,+1,0,0,0]"),
                         (1000.0, -2.5, 0.5, 3.0, 1.0, 0.0, 0.0, 0.0))

    def test_16_title_longer_than_varchar_limit(self):
        self.assertIsNone(parse_film_row(["1", "x" * 513, "1999", VECTOR_TEXT]))
        self.assertIsNotNone(parse_film_row(["1", "x" * 512, "1999", VECTOR_TEXT]))
        # the limit counts UTF-8 bytes
        self.assertIsNone(parse_film_row(["1", "é" * 257, "1999", VECTOR_TEXT]))
        self.assertIsNone(parse_film_row(["1", "Long", "1999", VECTOR_TEXT], title_max_length=3))


class TestLoadFilmCsv(unittest.TestCase):
    """Whole file loading"""

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.csv_path = os.path.join(self.tmp_dir, "films.csv")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _write(self, text):
        with open(self.csv_path, 'w', encoding='utf-8') as f:
            f.write(text)

    def test_01_malformed_rows_are_skipped(self):
        self._write(
            "id,title,year,vector\n"
            f'1,Good One,1994,"{VECTOR_TEXT}"\n'
            "2,Too Short,1990\n"
            f'x,Bad Id,1990,"{VECTOR_TEXT}"\n'
            f'3,Bad Year,soon,"{VECTOR_TEXT}"\n'
            '4,Bad Vector,1990,"[0.1,0.2]"\n'
            f'5,"Comma, In Title",2001,"{VECTOR_TEXT}"\n'
        )

        films = load_film_csv(self.csv_path)

        self.assertEqual([film.id for film in films], [1, 5])
        self.assertEqual(films[1].title, "Comma, In Title")
        logger.info(f"loaded {len(films)} films from malformed file")

    def test_02_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_film_csv(os.path.join(self.tmp_dir, "absent.csv"))

    def test_03_empty_file(self):
        self._write("")
        self.assertEqual(load_film_csv(self.csv_path), [])

    def test_04_bundled_sample_file(self):
        config = Config(config_dict={})
        films = load_film_csv(config.csv_path, config.dimension)

        self.assertEqual(len(films), 20)
        self.assertEqual(films[0].id, 1)
        self.assertEqual(len({film.vector for film in films}), len(films))

    def test_05_long_title_row_is_skipped(self):
        self._write(
            f'1,{"y" * 600},1994,"{VECTOR_TEXT}"\n'
            f'2,Short,1995,"{VECTOR_TEXT}"\n'
        )
        self.assertEqual([film.id for film in load_film_csv(self.csv_path)], [2])
        self.assertEqual(len(load_film_csv(self.csv_path, title_max_length=1000)), 2)


class TestFilmsToColumns(unittest.TestCase):
    """Columnar grouping for insert"""

    def test_01_columns_follow_schema_order(self):
        films = [
            Film(1, "A", 1994, EXPECTED_VECTOR),
            Film(2, "B", 2001, tuple(reversed(EXPECTED_VECTOR))),
        ]

        columns = films_to_columns(films, Config(config_dict={}))

        self.assertEqual([c.name for c in columns], ["ID", "Title", "Year", "Vector"])
        self.assertEqual([c.dtype for c in columns],
                         [DataType.INT64, DataType.VARCHAR, DataType.INT32, DataType.FLOAT_VECTOR])
        self.assertEqual(columns[0].values, (1, 2))
        self.assertEqual(columns[1].values, ("A", "B"))
        self.assertEqual(columns[2].values, (1994, 2001))
        self.assertEqual(columns[3].dim, 8)
        self.assertEqual(columns[3].values[0], EXPECTED_VECTOR)


if __name__ == "__main__":
    unittest.main()
