#!/usr/bin/env python3
"""
Seed restaurants, menu items and promotions from a JSON catalogue
(quickbite/data/catalogue.json by default).

Entries use the storefront's camelCase shape with decimal prices
("price": 12.99); explicit *_cents keys are honoured as-is. Existing rows
with the same id are updated in place.

Usage:
    python scripts/seed_catalogue.py --file ../mock/catalogue.json [--reset]
"""
import argparse
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from quickbite.db import CATALOGUE_PATH, SessionLocal, init_db, load_catalogue
from quickbite.db.seed import seed_catalogue


def seed_from_file(path: str, reset: bool = False):
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    try:
        data = load_catalogue(path)
    except ValueError as e:
        raise RuntimeError(f"Failed to parse JSON from {path}: {e}")

    init_db(reset=reset)
    db = SessionLocal()
    try:
        counts = seed_catalogue(db, data)
        db.commit()
        print("Seeded:", counts)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=str(CATALOGUE_PATH), help="Path to catalogue json")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate tables first")
    args = parser.parse_args()
    if not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    seed_from_file(args.file, reset=args.reset)
