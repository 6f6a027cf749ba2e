import importlib
import json
import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from quickbite.config import settings
from quickbite.utils.log import get_logger

log = get_logger("db")

DATABASE_URL = settings.DATABASE_URL
# sync routes and scheduler jobs touch SQLite from worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

CATALOGUE_PATH = Path(__file__).resolve().parent.parent / "data" / "catalogue.json"

# Every model module must be imported before create_all so metadata is populated.
MODEL_MODULES = [
    "quickbite.models.restaurant",
    "quickbite.models.menu_item",
    "quickbite.models.cart",
    "quickbite.models.cart_line",
    "quickbite.models.order",
    "quickbite.models.favorite",
    "quickbite.models.promotion",
]


def load_catalogue(path: Path = CATALOGUE_PATH) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def init_db(reset: bool = False):
    """
    Initialize DB schema and seed the bundled catalogue.

    Behavior:
      - If `reset` is True or the RESET_DB env var is 1/true/yes, drop & recreate tables.
      - Otherwise leave existing tables and rows in place.
      - Restaurants, menu items and promotions are seeded only when the
        restaurants table is empty, so repeated calls are idempotent.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    env_reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")
    if reset or env_reset:
        log.info("Resetting database")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)

    from quickbite.db.seed import seed_catalogue
    from quickbite.models.restaurant import Restaurant

    s = SessionLocal()
    try:
        if s.query(Restaurant).count() == 0:
            counts = seed_catalogue(s, load_catalogue())
            s.commit()
            log.info(f"Seeded catalogue: {counts}")
    except Exception:
        s.rollback()
        log.exception("Catalogue seeding failed")
        raise
    finally:
        s.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
