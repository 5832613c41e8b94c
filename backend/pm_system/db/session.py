from __future__ import annotations

import time
from collections.abc import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine

from pm_system import models  # noqa: F401  (registers tables on SQLModel.metadata)
from pm_system.core.config import Settings, get_settings
from pm_system.core.logging import get_logger

logger = get_logger(__name__)


def build_engine(settings: Settings) -> Engine:
    connect_args: dict[str, object] = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(get_settings())


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


def wait_for_database(
    db_engine: Engine,
    *,
    max_retries: int,
    delay_seconds: float,
    sleep=time.sleep,
) -> int:
    """Block until the store answers ``SELECT 1``; return the attempt that succeeded.

    Raises the last ``OperationalError`` once ``max_retries`` attempts have failed.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            with db_engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return attempt
        except OperationalError as exc:
            if attempt >= max_retries:
                logger.error("db.connect.gave_up attempts=%s error=%s", attempt, exc)
                raise
            logger.warning(
                "db.connect.retry attempt=%s max_retries=%s error=%s",
                attempt,
                max_retries,
                exc,
            )
            sleep(delay_seconds)


def init_db(db_engine: Engine | None = None, settings: Settings | None = None) -> None:
    db_engine = db_engine or engine
    settings = settings or get_settings()

    wait_for_database(
        db_engine,
        max_retries=settings.db_connect_max_retries,
        delay_seconds=settings.db_connect_retry_delay_seconds,
    )
    if settings.db_auto_migrate:
        from pm_system.db.migrations import run_migrations

        run_migrations(db_engine.url.render_as_string(hide_password=False))
        logger.info("db.migrations.applied")
    else:
        SQLModel.metadata.create_all(db_engine)
        logger.info("db.schema.created")
