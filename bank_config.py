# bank_config.py
# ============================================================
# CONFIGURATION
# ============================================================
# Everything comes from environment variables, with development defaults.
# No Flask secret key is configured: sessions are opaque ids kept server side
# by SessionManager, and nothing is stored in Flask's signed session cookie.
# ============================================================
import os

TRUE_VALUES = {"1", "true", "yes", "on"}


def env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


def env_int(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


def load_config(overrides=None):
    config = {
        "CSRF_STRATEGY": os.environ.get("CSRF_STRATEGY", "double-submit"),
        "SAMESITE_POLICY": os.environ.get("SAMESITE_POLICY", "Lax"),
        "COOKIE_SECURE": env_flag("COOKIE_SECURE"),
        "BANK_SESSION_COOKIE": os.environ.get("SESSION_COOKIE_NAME", "bank_sid"),
        "CSRF_COOKIE_NAME": os.environ.get("CSRF_COOKIE_NAME", "csrfToken"),
        "PBKDF2_ITERATIONS": env_int("PBKDF2_ITERATIONS", 200_000),
        "BANK_HOST": os.environ.get("BANK_HOST", "127.0.0.1"),
        "BANK_PORT": env_int("BANK_PORT", 5000),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
    }
    if overrides:
        config.update(overrides)
    return config
