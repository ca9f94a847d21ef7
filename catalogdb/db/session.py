import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

# Resolve .env relative to this file so it works regardless of CWD.
# Searches: <repo_root>/apps/api/.env, then <repo_root>/.env, then CWD/.env.
_repo_root = Path(__file__).resolve().parents[2]
for _candidate in [
    _repo_root / "apps" / "api" / ".env",
    _repo_root / ".env",
]:
    if _candidate.exists():
        load_dotenv(_candidate)
        break
else:
    load_dotenv()  # fallback to CWD


def _normalize_database_url(url: str) -> str:
    """Force psycopg v3 driver so SQLAlchemy does not try psycopg2."""
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://") :]
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://") :]
    if url.startswith("postgresql+psycopg2://"):
        return "postgresql+psycopg://" + url[len("postgresql+psycopg2://") :]
    return url


def build_database_url() -> str:
    direct = os.getenv("DATABASE_URL")
    if direct:
        return _normalize_database_url(direct)

    user = os.getenv("DATABASE_USER", "catalog_user")
    password = os.getenv("DATABASE_PW", "catalog_pw")
    name = os.getenv("DATABASE_NAME", "catalog_db")
    host = os.getenv("DATABASE_HOST", "localhost")
    port = os.getenv("DATABASE_PORT", "5432")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{name}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str | None = None, **kwargs) -> Engine:
    url = _normalize_database_url(url) if url else build_database_url()
    if url.startswith("postgresql"):
        kwargs.setdefault(
            "connect_args",
            {
                "keepalives": 1,
                "keepalives_idle": 10,
                "keepalives_interval": 5,
                "keepalives_count": 5,
                "connect_timeout": 30,
            },
        )
    engine = create_engine(url, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE clauses unless asked per connection.
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return make_engine()


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, future=True)


def SessionLocal():
    return get_sessionmaker()()
