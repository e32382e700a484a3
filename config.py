"""config.py

Client settings with environment overrides.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# ------------------------------ Defaults ------------------------------
DEFAULTS = {
    "service_url": "http://127.0.0.1:8765",
    "timeout_s": None,          # wait indefinitely for the service
    "log_level": "INFO",
    "layout_seed": 42,
    "figure_size": (12, 8),
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class ClientConfig:
    service_url: str = DEFAULTS["service_url"]
    timeout_s: Optional[float] = DEFAULTS["timeout_s"]
    log_level: str = DEFAULTS["log_level"]
    layout_seed: int = DEFAULTS["layout_seed"]
    figure_size: Tuple[int, int] = DEFAULTS["figure_size"]


def _env_number(name: str, cast, default, positive: bool = False):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a valid number, using %r", name, raw, default)
        return default
    if not math.isfinite(value) or value < 0 or (positive and value == 0):
        logger.warning("Ignoring %s=%r: out of range, using %r", name, raw, default)
        return default
    return value


def load_config() -> ClientConfig:
    """Build a ClientConfig from TOPOLOGY_* environment variables."""
    url = os.environ.get("TOPOLOGY_SERVICE_URL", "").strip() or DEFAULTS["service_url"]
    return ClientConfig(
        service_url=url.rstrip("/"),
        timeout_s=_env_number("TOPOLOGY_TIMEOUT_S", float, DEFAULTS["timeout_s"], positive=True),
        log_level=(os.environ.get("TOPOLOGY_LOG_LEVEL", "").strip() or DEFAULTS["log_level"]).upper(),
        layout_seed=_env_number("TOPOLOGY_LAYOUT_SEED", int, DEFAULTS["layout_seed"]),
    )


def configure_logging(config: ClientConfig) -> None:
    level = getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
