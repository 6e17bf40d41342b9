from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from src.settings import settings

# Base for models
Base = declarative_base()


def _connect_args(db_url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool
    if db_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(settings.DB_URL, connect_args=_connect_args(settings.DB_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """
    Create the tables for every model registered on Base.
    """
    # Import models so they register on Base.metadata
    from src.models import simulation  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# Dependency to get a DB session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
