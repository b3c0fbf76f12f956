from logging.config import dictConfig
import logging

from socialnet.config import settings


class SafeContextFormatter(logging.Formatter):
    """
    A formatter that safely handles missing request_id and user_id attributes.
    """

    def format(self, record):
        if not hasattr(record, 'request_id'):
            record.request_id = 'no-request-id'
        if not hasattr(record, 'user_id'):
            record.user_id = '-'
        return super().format(record)


# Central logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": SafeContextFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] [%(user_id)s] - %(message)s",
        },
        "detailed": {
            "()": SafeContextFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] [%(user_id)s] - %(threadName)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "detailed_console": {
            "class": "logging.StreamHandler",
            "formatter": "detailed",
        },
    },
    "root": {
        "level": "DEBUG" if settings.DEBUG else "INFO",
        "handlers": ["console"],
    },
    "loggers": {
        "socialnet": {  # Catch-all logger for all application modules
            "level": "DEBUG" if settings.DEBUG else "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        # Friend operations hop onto threadpool workers; show the thread name
        "socialnet.services.friending": {
            "level": "DEBUG" if settings.DEBUG else "INFO",
            "handlers": ["detailed_console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn.error": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn.access": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": "INFO" if settings.DEBUG else "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

def configure_logging():
    """Configure logging for the application."""
    dictConfig(LOGGING_CONFIG)
