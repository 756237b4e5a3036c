"""Database setup via SQLAlchemy. SQLite by default, any URL via DATABASE_URL."""
import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

# Default DB lives in data/ directory (gitignored)
_DB_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
_DEFAULT_URL = f"sqlite:///{os.path.join(_DB_DIR, 'ideaforge.db')}"
DATABASE_URL = os.getenv("DATABASE_URL") or _DEFAULT_URL

if DATABASE_URL == _DEFAULT_URL:
    os.makedirs(_DB_DIR, exist_ok=True)


def make_engine(url: str, **kwargs):
    """Create an engine; SQLite connections get foreign keys switched on."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    eng = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return eng


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class Base(DeclarativeBase):
    pass

def get_db():
    """FastAPI dependency for DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Create all tables."""
    import backend.models_db  # noqa: F401  registers the ORM models on Base
    Base.metadata.create_all(bind=bind or engine)
