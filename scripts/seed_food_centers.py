"""
Load food centers from a JSON file into the configured database.

The file holds a list of objects shaped like the POST /api/food-centers
body. Every entry is validated before anything is written.
"""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from mealmap.dependencies import get_db_client
from mealmap.schemas import FoodCenterCreate

logger = logging.getLogger(__name__)


def load_entries(path):
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of food centers")
    return data


def validate_entries(entries):
    """Return (valid payloads, list of (index, errors)) for the raw entries."""
    valid = []
    failures = []
    for index, entry in enumerate(entries):
        try:
            valid.append(FoodCenterCreate.model_validate(entry))
        except ValidationError as e:
            failures.append((index, e.errors()))
    return valid, failures


def seed(path, dry_run=False, db=None):
    entries = load_entries(path)
    valid, failures = validate_entries(entries)
    for index, errors in failures:
        for error in errors:
            loc = ".".join(str(part) for part in error["loc"])
            logger.error("Entry %d: %s: %s", index, loc, error["msg"])
    if failures:
        return 0, len(failures)
    if dry_run:
        logger.info("Validated %d food centers (dry run)", len(valid))
        return 0, 0

    db = db or get_db_client()
    for payload in valid:
        row = db.create_food_center(payload.model_dump(mode="json"))
        logger.info("Inserted %s (%s)", row["name"], row["id"])
    return len(valid), 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed food centers from a JSON file.")
    parser.add_argument("path", help="JSON file with a list of food centers")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing anything.",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    inserted, failed = seed(args.path, dry_run=args.dry_run)
    if failed:
        logger.error("%d invalid entries; nothing was written", failed)
        return 1
    logger.info("Done: %d inserted", inserted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
