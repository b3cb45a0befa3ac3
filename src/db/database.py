"""Database engine and sessions"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from src.db.schema import Base


def make_engine(database_url: str) -> Engine:
    """Create the engine and ensure all tables are created"""
    connect_args = (
        {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )
    engine = create_engine(database_url, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    return engine


def make_scoped_session(engine: Engine) -> scoped_session[Session]:
    """Thread-local sessions: engine moves are stored from timer threads"""
    return scoped_session(sessionmaker(autoflush=False, bind=engine))
