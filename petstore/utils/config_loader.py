"""
Configuration loader for the pet API and the contract tooling
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "petstore.yml"


class ServerConfig(BaseModel):
    """HTTP server binding"""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=0, le=65535)


class ContractsConfig(BaseModel):
    """Contract artifact location and participant names"""

    pact_dir: str = "pacts"
    consumer: str = "pet_consumer"
    provider: str = "pet_provider"
    provider_states_enabled: bool = False


class BrokerConfig(BaseModel):
    """Pact Broker to fetch contracts from and publish verification results to"""

    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    publish_results: bool = False
    provider_version: str = "1.0.0"


class VerifierConfig(BaseModel):
    """Provider verification settings"""

    timeout_seconds: float = Field(default=5.0, gt=0.0, le=300.0)
    state_change_url: Optional[str] = None
    broker: BrokerConfig = Field(default_factory=BrokerConfig)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    contracts: ContractsConfig = Field(default_factory=ContractsConfig)
    verifier: VerifierConfig = Field(default_factory=VerifierConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _env_flag(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in ("1", "true", "yes")


def _apply_env_overrides(data: dict) -> dict:
    server = data.setdefault("server", {})
    contracts = data.setdefault("contracts", {})
    verifier = data.setdefault("verifier", {})
    log_cfg = data.setdefault("logging", {})

    if os.getenv("PETSTORE_HOST"):
        server["host"] = os.environ["PETSTORE_HOST"]
    if os.getenv("PETSTORE_PORT"):
        server["port"] = os.environ["PETSTORE_PORT"]
    if os.getenv("PETSTORE_LOG_LEVEL"):
        log_cfg["level"] = os.environ["PETSTORE_LOG_LEVEL"]
    if os.getenv("PACT_DIR"):
        contracts["pact_dir"] = os.environ["PACT_DIR"]
    if os.getenv("PACT_CONSUMER"):
        contracts["consumer"] = os.environ["PACT_CONSUMER"]
    if os.getenv("PACT_PROVIDER"):
        contracts["provider"] = os.environ["PACT_PROVIDER"]
    if os.getenv("PACT_VERIFIER_TIMEOUT"):
        verifier["timeout_seconds"] = os.environ["PACT_VERIFIER_TIMEOUT"]

    broker = verifier.setdefault("broker", {}) or {}
    verifier["broker"] = broker
    if os.getenv("PACT_BROKER_URL"):
        broker["url"] = os.environ["PACT_BROKER_URL"]
    if os.getenv("PACT_BROKER_USERNAME"):
        broker["username"] = os.environ["PACT_BROKER_USERNAME"]
    if os.getenv("PACT_BROKER_PASSWORD"):
        broker["password"] = os.environ["PACT_BROKER_PASSWORD"]
    if os.getenv("PACT_PROVIDER_VERSION"):
        broker["provider_version"] = os.environ["PACT_PROVIDER_VERSION"]
    publish = _env_flag("PACT_PUBLISH_RESULTS")
    if publish is not None:
        broker["publish_results"] = publish

    states_enabled = _env_flag("PACT_PROVIDER_STATES_ENABLED")
    if states_enabled is not None:
        contracts["provider_states_enabled"] = states_enabled
    return data


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """
    Load and validate settings from YAML, then apply environment overrides

    Args:
        config_path: Path to config file. Defaults to config/petstore.yml;
            when the default file is absent the built-in defaults are used.

    Returns:
        Validated Settings object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv()

    data: dict = {}
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.exists():
            logger.warning("Config file %s not found, using defaults", config_path)
            config_path = None
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is not None:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    try:
        settings = Settings(**_apply_env_overrides(data))
        logger.info("Loaded settings from %s", config_path or "defaults")
        return settings
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise
