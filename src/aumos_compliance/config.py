"""Compliance pipeline configuration with Pydantic v2 validation.

Loads and validates a ``compliance.yaml`` file into a typed
:class:`ComplianceConfig`.  Every section is optional; unknown keys are
allowed so newer files still load.

Example
-------
>>> config = ConfigLoader().load_string('''
... rules:
...   path: ./rules/compliance_rules.yaml
... ai:
...   enabled: true
...   model: gpt-4o
... ''')
>>> config.cache.expire_after_write_seconds
3600.0
"""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from aumos_compliance.detection.scanner import DEFAULT_PLACEHOLDER_TEMPLATE, check_placeholder_template


class RulesConfig(BaseModel):
    """Where rules come from."""

    model_config = {"extra": "allow"}

    path: Path | None = Field(default=None)
    autoload: bool = Field(default=True)


class CacheConfig(BaseModel):
    """Expiry windows of the compliance cache."""

    model_config = {"extra": "allow"}

    expire_after_write_seconds: float = Field(default=3600.0, gt=0)
    expire_after_access_seconds: float = Field(default=1800.0, gt=0)

    @model_validator(mode="after")
    def check_windows(self) -> "CacheConfig":
        if self.expire_after_access_seconds > self.expire_after_write_seconds:
            raise ValueError(
                "expire_after_access_seconds must not exceed expire_after_write_seconds"
            )
        return self


class MatcherConfig(BaseModel):
    model_config = {"extra": "allow"}

    slow_rule_threshold_seconds: float = Field(default=0.5, gt=0)


class ScannerConfig(BaseModel):
    model_config = {"extra": "allow"}

    placeholder_template: str = Field(default=DEFAULT_PLACEHOLDER_TEMPLATE)

    @field_validator("placeholder_template")
    @classmethod
    def validate_template(cls, value: str) -> str:
        return check_placeholder_template(value)


class AiConfig(BaseModel):
    """Settings for the AI review backend."""

    model_config = {"extra": "allow"}

    enabled: bool = Field(default=False)
    endpoint: str | None = Field(default=None)
    api_key: str | None = Field(default=None)
    model: str = Field(default="gpt-4o")
    temperature: float = Field(default=0.0, ge=0, le=2)
    timeout_seconds: float = Field(default=60.0, gt=0)
    strict_parsing: bool = Field(default=False)


class AuditConfig(BaseModel):
    """Audit sink selection.  Events go to the logging sink when unset."""

    model_config = {"extra": "allow"}

    log_path: Path | None = Field(default=None)


class ComplianceConfig(BaseModel):
    """Top-level compliance pipeline configuration."""

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    rules: RulesConfig = Field(default_factory=RulesConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    ai: AiConfig = Field(default_factory=AiConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)


class ConfigLoader:
    """Loads and validates compliance YAML configuration."""

    def load(self, config_path: Path) -> ComplianceConfig:
        """Load and validate a configuration file.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ValueError:
            When the YAML content fails Pydantic validation.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Compliance config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw: dict[str, object] = yaml.safe_load(fh) or {}

        return ComplianceConfig.model_validate(raw)

    def load_string(self, yaml_content: str) -> ComplianceConfig:
        """Load and validate a YAML string."""
        raw: dict[str, object] = yaml.safe_load(yaml_content) or {}
        return ComplianceConfig.model_validate(raw)

    def defaults(self) -> ComplianceConfig:
        """Return a configuration with every default applied."""
        return ComplianceConfig()
