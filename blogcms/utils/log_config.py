import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Настройка корневого логгера. Вызывается один раз при старте приложения."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)

    # uvicorn и так пишет access-лог, SQLAlchemy слишком болтлив на INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
