"""
TreeToken Configuration Module.

Provides:
1. Defaults matching the reference deployment constants
2. Config file loading (JSON/TOML/YAML)
3. Environment variable overrides (TREETOKEN_* prefix)
4. Validation on construction

Configuration Hierarchy (highest to lowest priority):
1. Environment variables
2. Config file
3. Default values

Example:
    config = TokenConfig.load("token.toml")
    params = config.token.to_parameters()

    # Override with environment
    # TREETOKEN_TOKEN_MINTING_PERIOD=720
    # TREETOKEN_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .logging import LoggingOptions
from .models import (
    DEFAULT_MAX_SUPPLY,
    DEFAULT_MINTING_DECAY_RATE,
    DEFAULT_MINTING_PERIOD,
    NULL_ADDRESS,
    TokenParameters,
)

logger = logging.getLogger(__name__)

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# TREETOKEN_LOG_LEVEL reads the same as TREETOKEN_LOGGING_LEVEL.
_SECTION_ALIASES = {"log": "logging"}


# =============================================================================
# Configuration Sections
# =============================================================================

@dataclass
class TokenSection:
    """Supply and decay constants."""
    max_supply: int = DEFAULT_MAX_SUPPLY
    minting_decay_rate: int = DEFAULT_MINTING_DECAY_RATE
    minting_period: int = DEFAULT_MINTING_PERIOD
    null_address: str = NULL_ADDRESS
    # Fixed height mint decays against; None uses the caller-supplied block.
    legacy_mint_block: Optional[int] = None

    def __post_init__(self):
        self.null_address = str(self.null_address)
        if isinstance(self.legacy_mint_block, str) and self.legacy_mint_block.lower() in ("", "none", "null"):
            self.legacy_mint_block = None
        if self.legacy_mint_block is not None and self.legacy_mint_block < 0:
            raise ValueError("legacy_mint_block must be non-negative")
        self.to_parameters()

    def to_parameters(self) -> TokenParameters:
        return TokenParameters(
            max_supply=self.max_supply,
            minting_decay_rate=self.minting_decay_rate,
            minting_period=self.minting_period,
            null_address=self.null_address,
        )


@dataclass
class LoggingSection:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "text"  # "json" or "text"
    file: Optional[str] = None
    redact: bool = True

    def __post_init__(self):
        self.level = str(self.level).upper()
        self.format = str(self.format).lower()
        self.redact = bool(self.redact)
        if self.level not in _LEVELS:
            raise ValueError(f"Invalid logging level: {self.level}")
        if self.format not in ("json", "text"):
            raise ValueError(f"Invalid logging format: {self.format}")

    def to_options(self) -> LoggingOptions:
        return LoggingOptions(level=self.level, format=self.format, file=self.file, redact=self.redact)


# =============================================================================
# Main Configuration
# =============================================================================

@dataclass
class TokenConfig:
    """Combines all configuration sections into a single object."""
    token: TokenSection = field(default_factory=TokenSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    @classmethod
    def load(
        cls,
        config_file: Optional[Union[str, Path]] = None,
        env_prefix: str = "TREETOKEN",
    ) -> "TokenConfig":
        """
        Load configuration with hierarchy: env vars > config file > defaults.

        Args:
            config_file: Path to config file (JSON, TOML or YAML)
            env_prefix: Prefix for environment variables

        Returns:
            Loaded and validated configuration
        """
        config_dict: Dict[str, Any] = {}
        if config_file:
            config_dict = cls._load_file(Path(config_file))
        config_dict = cls._apply_env_overrides(config_dict, env_prefix)
        return cls._from_dict(config_dict)

    @classmethod
    def _load_file(cls, path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return {}

        content = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            parsed = json.loads(content)
        elif path.suffix == ".toml":
            parsed = tomllib.loads(content)
        elif path.suffix in {".yaml", ".yml"}:
            parsed = yaml.safe_load(content)
        else:
            logger.warning(f"Unknown config file format: {path.suffix}")
            return {}

        if not isinstance(parsed, dict):
            raise ValueError(f"Config file {path} must contain a mapping at top level")
        return parsed

    @classmethod
    def _apply_env_overrides(cls, config: Dict[str, Any], prefix: str) -> Dict[str, Any]:
        """Apply TREETOKEN_<SECTION>_<FIELD> overrides."""
        for key, value in os.environ.items():
            if not key.startswith(f"{prefix}_"):
                continue

            # TREETOKEN_TOKEN_MINTING_PERIOD -> token.minting_period
            parts = key[len(prefix) + 1:].lower().split("_")
            if len(parts) < 2:
                continue

            section = _SECTION_ALIASES.get(parts[0], parts[0])
            field_name = "_".join(parts[1:])
            config.setdefault(section, {})
            config[section][field_name] = cls._parse_env_value(value)

        return config

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            pass
        return value

    @staticmethod
    def _known_fields(section_cls: type, values: Dict[str, Any], section: str) -> Dict[str, Any]:
        names = {f.name for f in fields(section_cls)}
        unknown = sorted(set(values) - names)
        if unknown:
            logger.warning(f"Ignoring unknown [{section}] keys: {', '.join(unknown)}")
        return {k: v for k, v in values.items() if k in names}

    @classmethod
    def _from_dict(cls, config_dict: Dict[str, Any]) -> "TokenConfig":
        return cls(
            token=TokenSection(**cls._known_fields(TokenSection, config_dict.get("token", {}), "token")),
            logging=LoggingSection(**cls._known_fields(LoggingSection, config_dict.get("logging", {}), "logging")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
