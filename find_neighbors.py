"""
find_neighbors.py
─────────────────
Loads a text-format embedding file and prints the nearest neighbors of
each word given on the command line.

HOW TO RUN:
─────────────
    pip install -e .
    python find_neighbors.py king queen --embeddings data/glove.6B.50d.txt --k 5

Defaults (k, distance, log level) come from configs/default.yaml.
Compressed files are not handled: decompress them first.
"""

import argparse
import logging
import sys

from embedstore import FormatError, load_embeddings
from embedstore.config import build_distance, load_config
from embedstore.distances import create_distance


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Brute-force k-NN over word embeddings")
    parser.add_argument("words", nargs="*", help="Query words")
    parser.add_argument("--embeddings", default=None,
                        help="Embedding file (defaults to embeddings.path in the config)")
    parser.add_argument("--k", type=int, default=None, help="Number of neighbors")
    parser.add_argument("--distance", default=None, help="l2 or cosine")
    parser.add_argument("--include-self", action="store_true",
                        help="Keep the query word in its own results")
    parser.add_argument("--config", default=None, help="YAML config path")
    return parser.parse_args(argv)


def print_separator(char="─", width=50):
    print(char * width)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)

    logging.basicConfig(
        level=config.get("logging", {}).get("level", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    search_cfg = config.get("search", {})
    embeddings_cfg = config.get("embeddings", {})

    k = args.k if args.k is not None else search_cfg.get("k", 10)
    if k < 0:
        print(f"Invalid k: {k}", file=sys.stderr)
        return 1

    distance = create_distance(args.distance) if args.distance else build_distance(config)
    exclude_self = not args.include_self and search_cfg.get("exclude_exact_match", True)

    path = args.embeddings or embeddings_cfg.get("path")
    try:
        store = load_embeddings(
            path,
            encoding=embeddings_cfg.get("encoding", "utf-8"),
            report_interval=embeddings_cfg.get("report_interval", 50000),
        )
    except (FileNotFoundError, FormatError) as e:
        print(f"Failed to load '{path}': {e}", file=sys.stderr)
        return 1

    for word in args.words:
        results = store.knn_search(word, distance, exclude_exact_match=exclude_self, k=k)
        print(f"\n  {word}  ({distance.name}, k={k})")
        print_separator()
        if not results:
            print("    not found")
            continue
        for rank, entry in enumerate(results):
            print(f"    {rank:<4} {entry.key:<30} {entry.distance:.4f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
