"""Load medicines, pharmacies and inventory into the database.

Usage: python -m scripts.seed_catalog [path.json] [--database-url URL]

Without a path the bundled sample catalog is loaded. Entries are matched by
name (+ manufacturer / address) so re-running the script updates in place.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from medfinder.config import Settings
from medfinder.models import Medicine, Pharmacy
from medfinder.services.catalog import create_medicine, create_pharmacy, update_inventory

logger = logging.getLogger("seed_catalog")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

SAMPLE_PATH = Path(__file__).resolve().parent / "data" / "sample_catalog.json"

MEDICINE_FIELDS = ("name", "generic_name", "category", "description", "dosage", "manufacturer")
PHARMACY_FIELDS = (
    "name",
    "address",
    "phone",
    "latitude",
    "longitude",
    "rating",
    "review_count",
    "is_open",
    "open_time",
    "close_time",
    "delivery_available",
)


def load_catalog(path: Path) -> dict[str, list[dict[str, Any]]]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fp:
        data = json.load(fp)
    if not isinstance(data, dict):
        raise ValueError("Catalog file must be a JSON object")
    return {
        "medicines": list(data.get("medicines") or []),
        "pharmacies": list(data.get("pharmacies") or []),
        "inventory": list(data.get("inventory") or []),
    }


def _clean(raw: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    entry = {}
    for key in fields:
        value = raw.get(key)
        if isinstance(value, str):
            value = value.strip() or None
        if value is not None:
            entry[key] = value
    return entry


def _upsert_medicine(db: Session, raw: dict[str, Any]) -> tuple[Medicine, str]:
    entry = _clean(raw, MEDICINE_FIELDS)
    if not entry.get("name") or not entry.get("category"):
        raise ValueError(f"Medicine entry needs name and category: {raw}")
    existing = (
        db.query(Medicine)
        .filter_by(name=entry["name"], manufacturer=entry.get("manufacturer"))
        .first()
    )
    if existing is None:
        return create_medicine(db, **entry), "inserted"
    for key, value in entry.items():
        setattr(existing, key, value)
    return existing, "updated"


def _upsert_pharmacy(db: Session, raw: dict[str, Any]) -> tuple[Pharmacy, str]:
    entry = _clean(raw, PHARMACY_FIELDS)
    if not entry.get("name") or not entry.get("address"):
        raise ValueError(f"Pharmacy entry needs name and address: {raw}")
    existing = (
        db.query(Pharmacy)
        .filter_by(name=entry["name"], address=entry["address"])
        .first()
    )
    if existing is None:
        return create_pharmacy(db, **entry), "inserted"
    for key, value in entry.items():
        setattr(existing, key, value)
    return existing, "updated"


def sync_catalog(catalog: dict[str, list[dict[str, Any]]], db: Session) -> dict[str, dict[str, int]]:
    stats: dict[str, dict[str, int]] = {
        "medicines": {"inserted": 0, "updated": 0},
        "pharmacies": {"inserted": 0, "updated": 0},
        "inventory": {"upserted": 0, "skipped": 0},
    }
    medicines: dict[str, Medicine] = {}
    pharmacies: dict[str, Pharmacy] = {}

    for raw in catalog["medicines"]:
        medicine, action = _upsert_medicine(db, raw)
        medicines[medicine.name] = medicine
        stats["medicines"][action] += 1

    for raw in catalog["pharmacies"]:
        pharmacy, action = _upsert_pharmacy(db, raw)
        pharmacies[pharmacy.name] = pharmacy
        stats["pharmacies"][action] += 1

    for raw in catalog["inventory"]:
        medicine = medicines.get(raw.get("medicine"))
        pharmacy = pharmacies.get(raw.get("pharmacy"))
        if medicine is None or pharmacy is None:
            logger.warning("Skipping inventory row with unknown references: %s", raw)
            stats["inventory"]["skipped"] += 1
            continue
        update_inventory(
            db,
            medicine_id=medicine.id,
            pharmacy_id=pharmacy.id,
            price=float(raw.get("price") or 0),
            stock=int(raw.get("stock") or 0),
        )
        stats["inventory"]["upserted"] += 1

    db.commit()
    return stats


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Seed the MedFinder catalog")
    parser.add_argument("path", type=Path, nargs="?", default=SAMPLE_PATH, help="JSON catalog file")
    parser.add_argument(
        "--database-url",
        default=Settings().database_url,
        help="Override the DATABASE_URL the API uses",
    )
    args = parser.parse_args(argv)

    catalog = load_catalog(args.path)
    engine = create_engine(args.database_url)
    with sessionmaker(bind=engine)() as db:
        stats = sync_catalog(catalog, db)
    logger.info("Seed complete: %s (file=%s)", stats, args.path)


if __name__ == "__main__":
    main()
