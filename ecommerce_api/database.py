from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _is_memory_sqlite(url: URL) -> bool:
    return url.drivername.startswith("sqlite") and url.database in (None, "", ":memory:")


def _resolve_database_url(raw: str) -> tuple[URL, dict[str, object], dict[str, object]]:
    url = make_url(raw)

    connect_args: dict[str, object] = {}
    engine_kwargs: dict[str, object] = {"pool_pre_ping": True}

    if url.drivername.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        engine_kwargs.pop("pool_pre_ping", None)
        if _is_memory_sqlite(url):
            # One shared connection, otherwise every checkout sees an empty database.
            engine_kwargs["poolclass"] = StaticPool
        else:
            db_path = Path(url.database)
            if not db_path.is_absolute():
                db_path = (PROJECT_ROOT / db_path).resolve()
            else:
                db_path = db_path.expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            url = url.set(database=str(db_path))

    return url, connect_args, engine_kwargs


def build_engine(raw_url: str) -> Engine:
    url, connect_args, engine_kwargs = _resolve_database_url(raw_url)
    engine = create_engine(
        url,
        echo=False,
        connect_args=connect_args,
        **engine_kwargs,
    )

    if url.drivername.startswith("sqlite") and not _is_memory_sqlite(url):

        @event.listens_for(engine, "connect", insert=True)
        def set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass
