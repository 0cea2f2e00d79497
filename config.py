import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows tests to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason: Exception | str, expected: str) -> None:
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    _exit_with_config_error("RUNTIME_ENVIRONMENT", e, f"one of {', '.join(valid_values)}")

# Database
# TEST defaults to an in-memory database so tests never touch data/
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.TEST:
    DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///:memory:")
else:
    DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/gigaeats.db")

# Redis (realtime change streams)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD")
try:
    REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
except ValueError as e:
    _exit_with_config_error("REDIS_PORT", e, "integer port number (e.g., 6379)")

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log retention: PROD keeps logs longer than DEV/TEST
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# Parse PAGE_ENTRIES with error handling (default list limit)
try:
    PAGE_ENTRIES = int(os.environ.get("PAGE_ENTRIES", "50"))
    if PAGE_ENTRIES <= 0:
        raise ValueError(f"PAGE_ENTRIES must be positive (got: {PAGE_ENTRIES})")
except ValueError as e:
    _exit_with_config_error("PAGE_ENTRIES", e, "Positive integer (e.g., 10, 20, 50)")

# Checkout
try:
    MIN_ORDER_AMOUNT = float(os.environ.get("MIN_ORDER_AMOUNT", "0.0"))
    if MIN_ORDER_AMOUNT < 0:
        raise ValueError(f"MIN_ORDER_AMOUNT must not be negative (got: {MIN_ORDER_AMOUNT})")
except ValueError as e:
    _exit_with_config_error("MIN_ORDER_AMOUNT", e, "Non-negative number (e.g., 0, 25.0)")

CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "RM")

# Audit trail: strict mode commits the audit row together with the admin mutation
AUDIT_LOG_STRICT = os.environ.get("AUDIT_LOG_STRICT", "true") == "true"

# Realtime notification service
try:
    REALTIME_RECONNECT_DELAY_SECONDS = float(os.environ.get("REALTIME_RECONNECT_DELAY_SECONDS", "5"))
    REALTIME_COUNTS_REFRESH_SECONDS = float(os.environ.get("REALTIME_COUNTS_REFRESH_SECONDS", "30"))
    if REALTIME_RECONNECT_DELAY_SECONDS <= 0 or REALTIME_COUNTS_REFRESH_SECONDS <= 0:
        raise ValueError("realtime intervals must be positive")
except ValueError as e:
    _exit_with_config_error("REALTIME_RECONNECT_DELAY_SECONDS / REALTIME_COUNTS_REFRESH_SECONDS", e,
                            "Positive number of seconds (e.g., 5, 30)")
