#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Main module for the Milvus demo.
Loads the film CSV, inserts it into Milvus, builds indexes and runs a
similarity search with the first film's vector.
"""

import os
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from dotenv import load_dotenv

from milvus_demo.data.film_loader import Film, films_to_columns, load_film_csv
from milvus_demo.utils.config import Config
from milvus_demo.utils.logger import get_logger, set_level, setup_logger
from milvus_demo.vectordb.milvus_client import MilvusClient, SearchHit
from milvus_demo.vectordb.schema import build_film_schema, scalar_index, search_params, vector_index

logger = get_logger("milvus_demo.main")

RESULT_FORMAT = "file id: {id} title: {title} scores: {score:f}"


def load_films(config: Config) -> List[Film]:
    films = load_film_csv(config.csv_path, config.dimension, int(config.schema['title_max_length']))
    if not films:
        raise ValueError(f"no valid film rows found in {config.csv_path}")
    logger.info(f"Loaded {len(films)} films from {config.csv_path}")
    return films


def insert_films(client: MilvusClient, config: Config, films: Sequence[Film]) -> int:
    """
    Recreate the collection, insert films, build indexes and load it.

    Returns:
        int: number of inserted entities.
    """
    collection_name = config.milvus['collection_name']
    names = config.schema

    client.recreate_collection(collection_name, build_film_schema(config))

    inserted = client.insert(collection_name, "", *films_to_columns(films, config))
    client.flush(collection_name)
    logger.info("insert completed")

    client.create_index(collection_name, names['vector_field'], vector_index(config))
    client.create_index(collection_name, names['year_field'],
                        scalar_index(config.milvus['scalar_index_type']))
    client.load_collection(collection_name)
    return inserted


def search_films(client: MilvusClient, config: Config, query: Film) -> List[SearchHit]:
    """Search the collection with one film's vector."""
    milvus = config.milvus
    search = config.search

    start = time.perf_counter()
    results = client.search(
        milvus['collection_name'],
        [query.vector],
        anns_field=config.schema['vector_field'],
        top_k=int(search['top_k']),
        search_params=search_params(milvus['index_type'], milvus['metric_type'], int(milvus['nprobe'])),
        expr=search.get('filter_expr'),
        output_fields=search.get('output_fields'),
    )
    logger.info(f"search time elapsed: {time.perf_counter() - start:.4f}s")
    return results[0] if results else []


def format_hits(hits: Sequence[SearchHit], titles: Dict[int, str], title_field: str) -> List[str]:
    lines = []
    for hit in hits:
        title = hit.fields.get(title_field) or titles.get(hit.id, "")
        lines.append(RESULT_FORMAT.format(id=hit.id, title=title, score=hit.score))
    return lines


def run_insert(args, config: Config) -> None:
    films = load_films(config)
    with MilvusClient(config) as client:
        insert_films(client, config, films)


def run_search(args, config: Config) -> None:
    films = load_films(config)
    titles = {film.id: film.title for film in films}
    with MilvusClient(config) as client:
        hits = search_films(client, config, films[0])
    for line in format_hits(hits, titles, config.schema['title_field']):
        print(line)


def run_all(args, config: Config) -> None:
    films = load_films(config)
    titles = {film.id: film.title for film in films}
    with MilvusClient(config) as client:
        insert_films(client, config, films)
        hits = search_films(client, config, films[0])
    for line in format_hits(hits, titles, config.schema['title_field']):
        print(line)


def run_drop(args, config: Config) -> None:
    collection_name = config.milvus['collection_name']
    with MilvusClient(config) as client:
        if client.has_collection(collection_name):
            client.drop(collection_name)
        else:
            logger.warning(f"Collection `{collection_name}` does not exist")


COMMANDS = {
    "insert": run_insert,
    "search": run_search,
    "run": run_all,
    "drop": run_drop,
}


def _load_env() -> None:
    # .env next to the project root, else the current working directory
    project_root = Path(__file__).resolve().parent.parent
    env_path = project_root / '.env'
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    else:
        load_dotenv()


def _configure_logging(config: Config) -> None:
    level_name = os.environ.get("LOG_LEVEL") or config.get_general('log_level', 'INFO')
    level = getattr(logging, str(level_name).upper(), logging.INFO)

    log_settings = config.logging
    log_file = log_settings.get('log_file')
    if log_settings.get('file_output') and not log_file:
        log_dir = config.resolve_path(config.paths['log_dir'])
        log_file = os.path.join(log_dir, "milvus_demo.log")

    setup_logger(level=level, log_file=log_file, file_output=bool(log_settings.get('file_output')))
    set_level(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Milvus film vector demo")
    parser.add_argument("command", nargs="?", default="run", choices=sorted(COMMANDS),
                        help="insert: load films into Milvus; search: query with the first film; "
                             "run: insert then search (default); drop: drop the demo collection.")
    parser.add_argument("--config", "-c", help="Path to a configuration file (e.g., configs/default_config.yaml).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main function to parse arguments and execute commands."""
    args = build_parser().parse_args(argv)
    _load_env()

    try:
        config = Config(args.config)
        _configure_logging(config)
        logger.info(f"Executing command: {args.command}")
        COMMANDS[args.command](args, config)
    except Exception as e:
        logger.critical(f"Critical error executing command '{args.command}': {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
