import logging
from logging import config as logging_config

from pydantic_settings import BaseSettings, SettingsConfigDict

# Libraries that log every request at INFO; kept at WARNING unless debugging
NOISY_LOGGERS = ("botocore", "boto3", "aiobotocore", "urllib3", "httpx", "httpcore", "multipart")


class LoggingSettings(BaseSettings):
    level: str = "INFO"
    color: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_prefix="LOG_", extra="ignore")


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color.

    DEBUG cyan, INFO green, WARNING yellow, ERROR red, CRITICAL red background.
    """

    COLOR_MAP = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[41m",
    }
    RESET = "\x1b[0m"

    def format(self, record: logging.LogRecord) -> str:
        original_levelname = record.levelname
        color = self.COLOR_MAP.get(original_levelname, "")
        record.levelname = f"{color}{original_levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def configure_logging(level: str | None = None, color: bool | None = None) -> None:
    """Send application, uvicorn and celery logs to stdout."""
    settings = LoggingSettings()
    level = (level or settings.level).upper()
    color = settings.color if color is None else color

    default_fmt = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
    access_fmt = "%(asctime)s %(levelname)-5s %(message)s"

    def formatter(fmt: str) -> dict:
        spec = {"format": fmt, "datefmt": "%Y-%m-%d %H:%M:%S"}
        if color:
            spec["()"] = "clubhub.logging_config.ColoredFormatter"
        return spec

    cfg = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter(default_fmt), "access": formatter(access_fmt)},
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
            "access": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
            "celery": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {"handlers": ["default"], "level": level},
    }
    logging_config.dictConfig(cfg)

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["ColoredFormatter", "LoggingSettings", "configure_logging"]
