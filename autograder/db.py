from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from config import config
from autograder.models.database import Base


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    config.get_database_url(),
    pool_pre_ping=True,
    connect_args=_connect_args(config.get_database_url()),
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session() -> Session:
    return SessionLocal()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
