import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason: Exception, expected: str) -> None:
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
    _exit_with_config_error(
        "RUNTIME_ENVIRONMENT", e,
        f"one of {', '.join(env.value for env in RuntimeEnvironment)}"
    )

# Data store (products, discounts, affiliate coupon codes, client leads)
DB_NAME = os.environ.get("DB_NAME", "storefront.db")
DB_URL = os.environ.get("DB_URL", f"sqlite+aiosqlite:///data/{DB_NAME}")

# Client-side state (cart lines + checkout session id)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD")
CART_STORAGE_KEY = os.environ.get("CART_STORAGE_KEY", "storefront:cart")
CHECKOUT_SESSION_STORAGE_KEY = os.environ.get("CHECKOUT_SESSION_STORAGE_KEY", "storefront:checkout_session_id")

# Webhook relay endpoints (empty = not configured, events are skipped with a warning)
WEBHOOK_CHECKOUT_STARTED_URL = os.environ.get("WEBHOOK_CHECKOUT_STARTED_URL", "")
WEBHOOK_PURCHASE_COMPLETED_URL = os.environ.get("WEBHOOK_PURCHASE_COMPLETED_URL", "")
WEBHOOK_SOURCE = os.environ.get("WEBHOOK_SOURCE", "checkout_form")  # Used by the relay for routing

# Parse numeric checkout settings with error handling
try:
    WEBHOOK_TIMEOUT_SECONDS = float(os.environ.get("WEBHOOK_TIMEOUT_SECONDS", "10"))
    if WEBHOOK_TIMEOUT_SECONDS <= 0:
        raise ValueError(f"WEBHOOK_TIMEOUT_SECONDS must be positive (got: {WEBHOOK_TIMEOUT_SECONDS})")
except ValueError as e:
    _exit_with_config_error("WEBHOOK_TIMEOUT_SECONDS", e, "Positive number of seconds (e.g., 10)")

try:
    # Quiet period with no field changes before "checkout started" is emitted
    CHECKOUT_QUIESCENT_DELAY_SECONDS = float(os.environ.get("CHECKOUT_QUIESCENT_DELAY_SECONDS", "60"))
    if CHECKOUT_QUIESCENT_DELAY_SECONDS < 0:
        raise ValueError(f"CHECKOUT_QUIESCENT_DELAY_SECONDS must not be negative (got: {CHECKOUT_QUIESCENT_DELAY_SECONDS})")
except ValueError as e:
    _exit_with_config_error("CHECKOUT_QUIESCENT_DELAY_SECONDS", e, "Non-negative number of seconds (e.g., 60)")

try:
    CHECKOUT_PHONE_MIN_DIGITS = int(os.environ.get("CHECKOUT_PHONE_MIN_DIGITS", "10"))
    if CHECKOUT_PHONE_MIN_DIGITS <= 0:
        raise ValueError(f"CHECKOUT_PHONE_MIN_DIGITS must be positive (got: {CHECKOUT_PHONE_MIN_DIGITS})")
except ValueError as e:
    _exit_with_config_error("CHECKOUT_PHONE_MIN_DIGITS", e, "Positive integer (e.g., 10)")

# Pricing
SHIPPING_FLAT_FEE = float(os.environ.get("SHIPPING_FLAT_FEE", "168"))  # Flat rate per non-empty cart
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "R")

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask customer PII in logs

# Log Retention: Environment-specific defaults
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
