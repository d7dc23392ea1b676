"""CLI for building and reading a VOA news corpus."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from common.cli_helpers import print_json, setup_logging
from voa_corpus.config import load_config, set_config
from voa_corpus.corpus import Corpus

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Make a corpus of VOA articles for research.")
    parser.add_argument("--config", default=None, help="Config name in configs/ or path to a YAML file.")
    parser.add_argument("--corpus-dir", default=None, help="Corpus directory (overrides config).")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    update = subparsers.add_parser("update", help="Discover new articles and fetch them.")
    update.add_argument("--testing", action="store_true", help="One feed and one document only.")
    update.add_argument(
        "--url",
        dest="urls",
        action="append",
        default=None,
        help="Article URL to add instead of running discovery (repeatable).",
    )

    show = subparsers.add_parser("show", help="Print one document as JSON.")
    show.add_argument("document", help="Document index or URI.")

    subparsers.add_parser("list", help="Print every URI in the corpus.")
    subparsers.add_parser("stats", help="Print document counts.")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.verbose)

    config = load_config(args.config)
    if args.corpus_dir:
        config.corpus_directory = args.corpus_dir
    set_config(config)

    try:
        corpus = Corpus(config=config)
    except Exception as e:
        logger.error("Failed to open corpus: %s", e)
        return 1

    if args.command == "update":
        fetched = corpus.update(verbose=True, testing=args.testing, urls=args.urls)
        logger.info(
            "Fetched %d documents; corpus has %d documents",
            fetched,
            corpus.get_total_documents(),
        )
    elif args.command == "show":
        if args.document.isdigit():
            document = corpus.get_document(index=int(args.document))
        else:
            document = corpus.get_document(uri=args.document)
        if document is None:
            logger.warning("No document for %s", args.document)
            return 1
        print_json(document.to_dict())
    elif args.command == "list":
        for uri in corpus.get_all_uris():
            print(uri)
    elif args.command == "stats":
        total = corpus.get_total_documents()
        cached = sum(1 for position in range(total) if corpus.is_document_cached(position))
        print_json({"total_documents": total, "cached_documents": cached})

    return 0


if __name__ == "__main__":
    sys.exit(main())
