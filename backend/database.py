from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from config import DATABASE_URL

Base = declarative_base()
db_engine = None
SessionLocal = None


def _engine_options(db_url: str) -> dict:
    if not db_url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


def init_db(database_url: str = None):
    global db_engine, SessionLocal
    db_url = (database_url or DATABASE_URL).replace("postgres://", "postgresql://", 1)

    # Register every table on Base.metadata before create_all
    import models  # noqa: F401

    if db_engine is not None:
        db_engine.dispose()
    db_engine = create_engine(db_url, **_engine_options(db_url))
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=db_engine)
    Base.metadata.create_all(bind=db_engine)
    print("Database initialized successfully")
    return True


def reset_db():
    """Drop and recreate every table. Used by the test suite."""
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)


def get_db():
    if SessionLocal is None:
        init_db()
    return SessionLocal()
