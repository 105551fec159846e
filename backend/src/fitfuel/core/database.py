from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, SQLModel, create_engine

from .config import get_settings


def _sqlite_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # Required for SQLite when used with FastAPI in threaded servers.
        return {"check_same_thread": False}
    return {}


settings = get_settings()

engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    connect_args=_sqlite_connect_args(settings.database_url),
)


def init_db() -> None:
    # Import models so SQLModel sees the metadata.
    from fitfuel.models import meals, nutrition, tracking, workouts  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


def upsert(
    session: Session,
    model: type,
    values: Dict[str, Any],
    conflict_columns: Sequence[str],
    insert_only: Iterable[str] = (),
) -> None:
    """Single-statement INSERT ... ON CONFLICT DO UPDATE; the last writer wins.

    ``insert_only`` columns keep the value of the first insert.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    elif dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    else:
        raise NotImplementedError(f"upsert is not supported on {dialect}")

    keep = set(conflict_columns) | set(insert_only)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={k: stmt.excluded[k] for k in values if k not in keep},
    )
    session.exec(stmt)
