# exam_logistics/logging_config.py
import logging
from typing import Any, Dict


# Allocation services attach run_id through ``extra``; everything else gets a default
class RunIdFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "run_id"):
            record.run_id = "no-run-id"
        return True


LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "run_id_filter": {
            "()": RunIdFilter,
        },
    },
    "formatters": {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(asctime)s [%(name)s] [%(run_id)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(asctime)s [%(name)s] [%(run_id)s] %(client_addr)s - "%(request_line)s" %(status_code)s',
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        # Keeps tracebacks on failed runs
        "detailed": {
            "format": "%(levelname)s %(asctime)s [%(name)s] [%(module)s:%(lineno)d] - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "filters": ["run_id_filter"],
        },
        "access": {
            "formatter": "access",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "filters": ["run_id_filter"],
        },
        "error": {
            "formatter": "detailed",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "level": "ERROR",
            "filters": ["run_id_filter"],
        },
    },
    "loggers": {
        "": {
            "handlers": ["default", "error"],
            "level": "INFO",
        },
        "uvicorn.access": {
            "handlers": ["access"],
            "level": "INFO",
            "propagate": False,
        },
        # Allocation warnings (unstaffed rooms, unseated students) live here
        "exam_logistics": {
            "handlers": ["default", "error"],
            "level": "DEBUG",
            "propagate": False,
        },
    },
}
