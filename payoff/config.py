# payoff/config.py
import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-numeric %s=%r, using %s", key, raw, default)
        return default

def _env_int(key: str, default: int) -> int:
    return int(_env_float(key, default))

@dataclass(frozen=True)
class Settings:
    max_months: int = 720             # 60 years
    single_card_max_months: int = 600 # 50 years
    epsilon: float = 0.005
    min_percent: float = 1.0
    min_fixed: float = 25.0
    currency_symbol: str = "$"
    log_level: str = "WARNING"

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        max_months=_env_int("PAYOFF_MAX_MONTHS", 720),
        single_card_max_months=_env_int("PAYOFF_SINGLE_CARD_MAX_MONTHS", 600),
        epsilon=_env_float("PAYOFF_EPSILON", 0.005),
        min_percent=_env_float("PAYOFF_MIN_PERCENT", 1.0),
        min_fixed=_env_float("PAYOFF_MIN_FIXED", 25.0),
        currency_symbol=os.getenv("PAYOFF_CURRENCY_SYMBOL", "$"),
        log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
    )

def configure_logging(level: str = None) -> None:
    """Basic console logging for scripts and notebooks; the library itself never calls this."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
