"""
SmartCalc runtime configuration.
Settings are read from SMARTCALC_* environment variables.
"""

import os

from pydantic import BaseModel


ENV_PREFIX = "SMARTCALC_"


class Settings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    live_rates: bool = False
    rates_url: str = "https://api.exchangerate.host/latest"
    rates_timeout: float = 3.0


def load_settings(environ=None):
    """
    Build Settings from the environment.

    Args:
        environ (dict): Mapping to read from, defaults to os.environ

    Returns:
        Settings: validated settings; unset variables keep their defaults
    """
    environ = os.environ if environ is None else environ
    values = {}
    for field in Settings.model_fields:
        key = ENV_PREFIX + field.upper()
        if key in environ:
            values[field] = environ[key]
    return Settings(**values)
