"""
Configuration management.
"""

import json
import os
from dataclasses import asdict, dataclass, field

from core.avm.settings import AvmSettings


def _load_model_weights() -> dict:
    raw = os.getenv("AVM_MODEL_WEIGHTS")
    if not raw:
        return {}
    try:
        weights = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"AVM_MODEL_WEIGHTS is not valid JSON: {exc}") from exc
    if not isinstance(weights, dict):
        raise ValueError("AVM_MODEL_WEIGHTS must be a JSON object of model id to weight")
    return {str(k): float(v) for k, v in weights.items()}


def _load_avm_settings() -> AvmSettings:
    return AvmSettings(
        default_radius_km=float(os.getenv("AVM_DEFAULT_RADIUS_KM", "2.0")),
        min_comparables=int(os.getenv("AVM_MIN_COMPARABLES", "3")),
        max_comparables=int(os.getenv("AVM_MAX_COMPARABLES", "10")),
        max_age_months=int(os.getenv("AVM_MAX_AGE_MONTHS", "12")),
        confidence_level=int(os.getenv("AVM_CONFIDENCE_LEVEL", "95")),
        confidence_spread=float(os.getenv("AVM_CONFIDENCE_SPREAD", "0.10")),
        model_weights=_load_model_weights(),
    )


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "standard"))

    # Valuation
    currency: str = field(default_factory=lambda: os.getenv("CURRENCY", "EUR"))
    avm: AvmSettings = field(default_factory=_load_avm_settings)

    # Reports
    reports_dir: str = field(default_factory=lambda: os.getenv("REPORTS_DIR", "./reports"))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")
        if self.log_format not in ("standard", "json"):
            raise ValueError("log_format must be 'standard' or 'json'")

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "currency": self.currency,
            "avm": asdict(self.avm),
            "reports_dir": self.reports_dir,
        }
