import logging

from docversion.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Настройка корневого логгера приложения"""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # SQL пишет сам движок при sql_echo, дублировать не нужно
    logging.getLogger("sqlalchemy.engine").propagate = False
