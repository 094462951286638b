"""Walk through add/update/remove against a running MongoDB server."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from mongo_facade import StoreSettings, connect, create_document_store, get_collection

PROJECT_ROOT = Path(__file__).resolve().parents[1]

load_dotenv(PROJECT_ROOT / ".env")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Exercise the document store façade.")
    parser.add_argument(
        "--host",
        default=os.getenv("MONGO_HOST", "localhost"),
        help="Host or service name of the MongoDB server (default: $MONGO_HOST or localhost).",
    )
    parser.add_argument("--database", default="test", help="Database name.")
    parser.add_argument("--collection", default="test", help="Collection name.")
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-call timeout in seconds.")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    logging.basicConfig(
        level=logging.INFO if not args.quiet else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )
    logger = logging.getLogger("demo_crud")

    settings = StoreSettings(timeout=args.timeout)
    client = connect(args.host, settings=settings)
    try:
        store = create_document_store(
            get_collection(client, args.database, args.collection),
            settings=settings,
        )

        document_id = store.add({"item": "a"})
        logger.info("ADD -> %s", document_id)
        logger.info("ALL -> %s", store.get_all())

        updated = store.update({"item": "a"}, {"$set": {"item": "b"}})
        logger.info("UPDATE -> %s %s", updated.outcome.value, updated.document)

        removed = store.remove({"item": "b"})
        logger.info("REMOVE -> %s %s", removed.outcome.value, removed.document)

        document_id = store.add({"item": "a"})
        logger.info("ADD ID -> %s", document_id)

        updated = store.update_by_id(document_id, {"$set": {"item": "b"}})
        logger.info("UPDATE ID -> %s %s", updated.outcome.value, updated.document)

        removed = store.remove_by_id(document_id)
        logger.info("REMOVE ID -> %s %s", removed.outcome.value, removed.document)
        logger.info("ALL -> %s", store.get_all())
    finally:
        client.close()


if __name__ == "__main__":
    main()
