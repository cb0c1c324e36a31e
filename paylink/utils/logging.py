"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Every record is emitted as one JSON object on stdout, with `extra` fields
merged in at the top level:

{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "paylink.services.webhooks",
    "message": "Order moved to processing.",
    "orderId": 1001
}

Extras whose names look like credentials are replaced with "***", and phone
numbers are masked down to their last four digits.
"""

import os
import re
import json
import logging
import logging.config
from datetime import datetime, UTC
from typing import Any

from paylink.constants import ENV


# Attributes every LogRecord carries; anything else on a record came from `extra`
_RECORD_ATTRS = frozenset(logging.LogRecord('', logging.INFO, '', 0, '', (), None).__dict__) | {'message', 'asctime'}

_SECRET_KEY_RE = re.compile(r'(secret|token|password|api_?key|authorization)', re.IGNORECASE)
_PHONE_KEY_RE = re.compile(r'(phone|^to$)', re.IGNORECASE)

REDACTED = '***'


def mask_phone(value: Any) -> str:
    digits = str(value)
    return f'{"*" * max(len(digits) - 4, 0)}{digits[-4:]}'


def redact(key: str, value: Any) -> Any:
    if value is None:
        return None
    if _SECRET_KEY_RE.search(key):
        return REDACTED
    if _PHONE_KEY_RE.search(key):
        return mask_phone(value)
    return value


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds')
        log = {
            'timestamp': timestamp.replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update({key: redact(key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS})

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str, ensure_ascii=False)


def logging_config(level: str) -> dict[str, Any]:
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {'json': {'()': JsonFormatter}},
        'handlers': {
            'stdout': {
                'class': 'logging.StreamHandler',
                'formatter': 'json',
                'stream': 'ext://sys.stdout',
            }
        },
        'loggers': {
            # Provider SDKs log full request URLs and bodies at DEBUG
            'stripe': {'level': 'WARNING'},
            'twilio': {'level': 'WARNING'},
            'urllib3': {'level': 'WARNING'},
            'botocore': {'level': 'WARNING'},
        },
        'root': {'level': level, 'handlers': ['stdout']},
    }


def initialize_logging() -> None:
    logging.config.dictConfig(logging_config(os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()))
