import logging

from app.db import engine, Base
from app import models  # registers every table on Base.metadata

logger = logging.getLogger(__name__)


def main():
    """Create all database tables"""
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    main()
