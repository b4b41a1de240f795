from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Newton-Raphson IRR settings
IRR_TOL = 1e-10
IRR_MAX_ITER = 100
IRR_INITIAL_GUESS = 0.10
RATE_FLOOR = -0.99

CURRENCIES = ("PEN", "USD", "EUR")
INTEREST_TYPES = ("effective", "nominal")


@dataclass(frozen=True)
class AppConfig:
    """
    Defaults used to pre-fill new bond definitions.

    Has no effect on valuation math: a bond carries its own interest type
    and capitalization once created.
    """
    currency: str = "PEN"
    interest_type: str = "effective"
    capitalization: int = 12

    def __post_init__(self):
        if self.currency not in CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")
        if self.interest_type not in INTEREST_TYPES:
            raise ValueError(f"Unsupported interest type: {self.interest_type}")
        if int(self.capitalization) <= 0:
            raise ValueError("capitalization must be positive")

    def updated(self, **changes) -> "AppConfig":
        return replace(self, **changes)


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load an AppConfig from a YAML mapping.

    Missing file -> defaults. Unknown keys are ignored, invalid values raise.
    """
    if path is None:
        return AppConfig()

    path = Path(path)
    if not path.exists():
        logger.warning(f"Config file {path} not found, using defaults")
        return AppConfig()

    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping.")

    known = {f.name for f in fields(AppConfig)}
    ignored = sorted(set(raw) - known)
    if ignored:
        logger.info(f"Ignoring unknown config keys: {ignored}")

    cfg = AppConfig(**{k: v for k, v in raw.items() if k in known})
    logger.info(f"Loaded config from {path}")
    return cfg
