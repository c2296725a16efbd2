"""
Centralized settings and path configuration for the frame pricing engine.

Environment overrides:
    FRAME_PRICING_DATA_DIR   directory holding the catalog CSV files
    FRAME_PRICING_TAX_RATE   sales tax rate, e.g. 0.0825
    FRAME_PRICING_LOG_LEVEL  DEBUG / INFO / WARNING ...
"""
import os
from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

# Single source for the sales tax rate; engine.rate_tables re-exports it.
TAX_RATE = Decimal('0.0825')


def get_package_root() -> Path:
    """Get the frame_pricing package directory."""
    return Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Catalog files
    data_dir: Path
    frames_csv: Path
    matboards_csv: Path
    glass_csv: Path
    special_services_csv: Path

    # Pricing
    tax_rate: Decimal = TAX_RATE

    # Logging
    log_level: str = "INFO"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and package layout."""
        root = data_dir or Path(os.environ.get(
            'FRAME_PRICING_DATA_DIR', get_package_root() / 'data'
        ))

        tax_rate = TAX_RATE
        raw_rate = os.environ.get('FRAME_PRICING_TAX_RATE')
        if raw_rate:
            try:
                tax_rate = Decimal(raw_rate.strip())
            except InvalidOperation:
                raise ValueError(f"FRAME_PRICING_TAX_RATE is not a number: {raw_rate!r}")
            if not tax_rate.is_finite() or tax_rate < 0:
                raise ValueError(f"FRAME_PRICING_TAX_RATE must be a non-negative rate: {raw_rate!r}")

        return cls(
            data_dir=root,
            frames_csv=root / 'frames.csv',
            matboards_csv=root / 'matboards.csv',
            glass_csv=root / 'glass.csv',
            special_services_csv=root / 'special_services.csv',
            tax_rate=tax_rate,
            log_level=os.environ.get('FRAME_PRICING_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
