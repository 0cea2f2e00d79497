"""
Centralized Logging Configuration

Provides logging for the GigaEats core with:
- Configurable log level
- Daily log rotation
- Masking of credentials and customer personal data
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Masks:
    - API keys, tokens and passwords
    - Email addresses
    - Phone numbers
    - Delivery addresses
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        # API keys / service-role keys
        (re.compile(r'(api[_-]?key["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_API_KEY]\3'),

        # Tokens
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:.]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),

        # Passwords (including redis://:password@host URLs)
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_PASSWORD]\3'),
        (re.compile(r'(://[^:/\s]*:)([^@\s]+)(@)'), r'\1[REDACTED_PASSWORD]\3'),

        # Email addresses
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),

        # Phone numbers (Malaysian +60 and generic formats)
        (re.compile(r'(\+?6?0)[-\s]?1\d[-\s]?\d{3,4}[-\s]?\d{4}\b'), '[REDACTED_PHONE]'),
        (re.compile(r'\b(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),

        # Delivery addresses
        (re.compile(r'(address["\']?\s*[:=]\s*["\']?)([^"\']{10,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_ADDRESS]\3'),
    ]

    def mask(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask the record's message and string arguments; never drops a record."""
        if record.msg:
            record.msg = self.mask(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self.mask(v) if isinstance(v, str) else v for k, v in record.args.items()}
            else:
                record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)

        return True


def setup_logging(log_dir: Path | str = "logs"):
    """
    Initialize logging. Call once at application startup.

    Configuration:
    - Log level from config.LOG_LEVEL
    - Rotation every midnight, config.LOG_RETENTION_DAYS backups kept
    - Secrets masked if config.LOG_MASK_SECRETS is True
    - Writes to <log_dir>/gigaeats.log and to the console
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True)

    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "gigaeats.log",
        when="midnight",
        interval=1,
        backupCount=config.LOG_RETENTION_DAYS,
        encoding="utf-8"
    )
    console_handler = logging.StreamHandler()

    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        if config.LOG_MASK_SECRETS:
            handler.addFilter(SecretMaskingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # SQL statements only at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if log_level <= logging.DEBUG else logging.WARNING)

    logging.info(f"Logging initialized: Level={config.LOG_LEVEL}, Retention={config.LOG_RETENTION_DAYS} days, "
                 f"Masking={'ENABLED' if config.LOG_MASK_SECRETS else 'DISABLED'}")
