# File: hr_briefing/utils/logger.py
"""Logging configuration and failure reports"""
import logging
import json
import os
import sys
from datetime import datetime, timezone
from typing import Dict, Any, List

ROOT_LOGGER = 'hr_briefing'

DEFAULT_LOGGING = {
    'level': 'INFO',
    'file_enabled': False,
    'file_path': 'briefing.log',
    'console_enabled': True,
    'format': 'standard',
}

STANDARD_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Extras attached through logger.info(..., extra={...})
STRUCTURED_FIELDS = ('url', 'site', 'count')

# Client libraries that log every request at INFO
NOISY_LOGGERS = ('httpx', 'openai', 'aiohttp.access')


class JSONFormatter(logging.Formatter):
    """One JSON object per line, Korean text left unescaped"""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f'{record.module}.{record.funcName}:{record.lineno}',
        }
        entry.update({name: getattr(record, name) for name in STRUCTURED_FIELDS if hasattr(record, name)})
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _build_handlers(config: Dict[str, Any]) -> List[logging.Handler]:
    formatter = JSONFormatter() if config['format'] == 'json' else logging.Formatter(STANDARD_FORMAT)

    handlers: List[logging.Handler] = []
    if config['console_enabled']:
        handlers.append(logging.StreamHandler(sys.stdout))
    if config['file_enabled']:
        handlers.append(logging.FileHandler(config['file_path'], encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(config: Dict[str, Any] = None) -> logging.Logger:
    """Configure the package logger from the ``logging`` config section.

    ``LOG_LEVEL`` in the environment overrides the configured level.
    """
    config = {**DEFAULT_LOGGING, **(config or {})}
    level_name = os.getenv('LOG_LEVEL') or config['level']

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, str(level_name).upper(), logging.INFO))
    logger.handlers.clear()
    for handler in _build_handlers(config):
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the package root; accepts bare or dotted module names"""
    if name == ROOT_LOGGER or name.startswith(f'{ROOT_LOGGER}.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')


def build_error_report(context: str, error: BaseException) -> str:
    """Human-readable failure report sent along with pipeline alerts"""
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    return '\n'.join([
        f'실패 지점: {context}',
        f'타임스탬프: {timestamp}',
        f'에러: {type(error).__name__}: {error}',
    ])
