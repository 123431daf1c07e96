import logging

from app.db import base # noqa: F401 - registers every model on Base.metadata
from app.db.base_class import Base
from app.db.session import engine, SessionLocal
from app.crud import crud_commission_config

logger = logging.getLogger(__name__)

def init_db() -> None:
    """
    Create the tables and seed default commission configs.
    For a more robust setup, manage the schema with migrations.
    """
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = crud_commission_config.ensure_default_commission_configs(db)
        logger.info(f"Database initialized, {len(created)} default commission configs created")
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
