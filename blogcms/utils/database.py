import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from blogcms.config import settings
from blogcms.utils.exceptions import StoreError

logger = logging.getLogger(__name__)


def build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # Сессия живет в одном запросе, но FastAPI может гонять её по разным потокам
        connect_args["check_same_thread"] = False
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session, action: str):
    """
    Обертка вокруг любого обращения к БД.

    Ошибка драйвера/ORM откатывает сессию, пишется в лог и превращается
    в StoreError. Наружу детали ошибки БД не уходят.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store failure while %s: %s", action, exc)
        raise StoreError() from exc
