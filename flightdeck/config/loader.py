"""
Configuration management and loading.

Reads runtime settings, provider credentials locations and airport facts
from a YAML file. Every section is optional and falls back to built-in
defaults, but whatever is present is validated strictly.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from flightdeck.airports.directory import SAMPLE_AIRPORTS
from flightdeck.airports.models import AirportFacts, AirspaceClass, Frequency, Runway
from flightdeck.core.dispatcher import DEFAULT_TIMEOUT_SECONDS
from flightdeck.core.routing import UserTier
from flightdeck.storage.db import DEFAULT_DB_PATH

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


@dataclass(frozen=True)
class ProviderConfig:
    """Where a provider's credentials live and how to reach it."""
    api_key_env: str
    base_url: Optional[str] = None

    def __post_init__(self):
        if not self.api_key_env or not self.api_key_env.strip():
            raise ValueError("api_key_env cannot be empty")


@dataclass(frozen=True)
class RuntimeSettings:
    tier: UserTier = UserTier.BASIC
    preferred_capability: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    database: str = DEFAULT_DB_PATH

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")


DEFAULT_PROVIDERS: Dict[str, ProviderConfig] = {
    "anthropic": ProviderConfig(api_key_env="ANTHROPIC_API_KEY"),
    "google": ProviderConfig(api_key_env="GEMINI_API_KEY", base_url=GEMINI_OPENAI_BASE_URL),
    "openai": ProviderConfig(api_key_env="OPENAI_API_KEY"),
}


@dataclass(frozen=True)
class RuntimeConfig:
    """Complete runtime configuration."""
    settings: RuntimeSettings = field(default_factory=RuntimeSettings)
    providers: Dict[str, ProviderConfig] = field(default_factory=lambda: dict(DEFAULT_PROVIDERS))
    airports: Tuple[AirportFacts, ...] = SAMPLE_AIRPORTS


def default_config() -> RuntimeConfig:
    return RuntimeConfig()


def load_runtime_config(path: str) -> RuntimeConfig:
    """Load and validate runtime configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated RuntimeConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Runtime config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    _check_keys(raw_config, {'runtime', 'providers', 'airports'}, "configuration")

    settings = _parse_settings(raw_config.get('runtime') or {})

    providers = dict(DEFAULT_PROVIDERS)
    providers_data = raw_config.get('providers') or {}
    if not isinstance(providers_data, dict):
        raise ValueError("'providers' must be a dictionary")
    for name, provider_data in providers_data.items():
        if name not in DEFAULT_PROVIDERS:
            raise ValueError(f"Unknown provider '{name}'; expected one of: {sorted(DEFAULT_PROVIDERS)}")
        providers[name] = _parse_provider(provider_data, name)

    airports = SAMPLE_AIRPORTS
    if 'airports' in raw_config:
        airports_data = raw_config['airports']
        if not isinstance(airports_data, dict):
            raise ValueError("'airports' must be a dictionary")
        airports = tuple(
            _parse_airport(code, data) for code, data in airports_data.items()
        )

    return RuntimeConfig(settings=settings, providers=providers, airports=airports)


def _check_keys(data: Dict, allowed: set, path: str) -> None:
    unknown_keys = set(data.keys()) - allowed
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")


def _parse_settings(data: Any) -> RuntimeSettings:
    if not isinstance(data, dict):
        raise ValueError("'runtime' must be a dictionary")
    _check_keys(data, {'tier', 'preferred_capability', 'timeout_seconds', 'database'}, "runtime")

    tier = UserTier.BASIC
    if 'tier' in data:
        try:
            tier = UserTier(str(data['tier']).lower())
        except ValueError:
            raise ValueError(f"'runtime.tier' must be one of: {[t.value for t in UserTier]}")

    preferred = data.get('preferred_capability')
    if preferred is not None and not isinstance(preferred, str):
        raise ValueError("'runtime.preferred_capability' must be a string")

    timeout = data.get('timeout_seconds', DEFAULT_TIMEOUT_SECONDS)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("'runtime.timeout_seconds' must be > 0")

    database = data.get('database', DEFAULT_DB_PATH)
    if not isinstance(database, str) or not database:
        raise ValueError("'runtime.database' must be a non-empty string")

    return RuntimeSettings(
        tier=tier,
        preferred_capability=preferred,
        timeout_seconds=float(timeout),
        database=database,
    )


def _parse_provider(data: Any, name: str) -> ProviderConfig:
    path = f"providers.{name}"
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' must be a dictionary")
    _check_keys(data, {'api_key_env', 'base_url'}, path)

    if 'api_key_env' not in data:
        raise ValueError(f"Missing required 'api_key_env' in {path}")
    api_key_env = data['api_key_env']
    if not isinstance(api_key_env, str) or not api_key_env.strip():
        raise ValueError(f"'api_key_env' in {path} must be a non-empty string")

    base_url = data.get('base_url', DEFAULT_PROVIDERS[name].base_url)
    if base_url is not None and not isinstance(base_url, str):
        raise ValueError(f"'base_url' in {path} must be a string")

    return ProviderConfig(api_key_env=api_key_env, base_url=base_url)


def _parse_airport(code: Any, data: Any) -> AirportFacts:
    path = f"airports.{code}"
    if not isinstance(code, str) or not code.strip():
        raise ValueError("Airport codes must be non-empty strings")
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' must be a dictionary")
    _check_keys(data, {'name', 'elevation', 'airspace_class', 'tower_controlled', 'runways', 'frequencies'}, path)

    if 'name' not in data:
        raise ValueError(f"Missing required 'name' in {path}")

    elevation = data.get('elevation', 0)
    if isinstance(elevation, bool) or not isinstance(elevation, int):
        raise ValueError(f"'elevation' in {path} must be an integer")

    airspace_class = None
    if data.get('airspace_class') is not None:
        try:
            airspace_class = AirspaceClass(str(data['airspace_class']).upper())
        except ValueError:
            raise ValueError(f"'airspace_class' in {path} must be one of: {[c.value for c in AirspaceClass]}")

    tower_controlled = data.get('tower_controlled', False)
    if not isinstance(tower_controlled, bool):
        raise ValueError(f"'tower_controlled' in {path} must be true or false")

    runways = []
    for i, runway in enumerate(data.get('runways') or []):
        runway_path = f"{path}.runways[{i}]"
        if not isinstance(runway, dict) or 'identifier' not in runway:
            raise ValueError(f"'{runway_path}' must be a dictionary with an 'identifier'")
        _check_keys(runway, {'identifier', 'headings'}, runway_path)
        headings = runway.get('headings') or []
        if not all(isinstance(h, int) and not isinstance(h, bool) for h in headings):
            raise ValueError(f"'headings' in {runway_path} must be integers")
        runways.append(Runway(identifier=str(runway['identifier']), headings=tuple(headings)))

    frequencies = []
    for i, frequency in enumerate(data.get('frequencies') or []):
        frequency_path = f"{path}.frequencies[{i}]"
        if not isinstance(frequency, dict):
            raise ValueError(f"'{frequency_path}' must be a dictionary")
        _check_keys(frequency, {'type', 'description', 'mhz'}, frequency_path)
        mhz = frequency.get('mhz')
        if isinstance(mhz, bool) or not isinstance(mhz, (int, float)) or mhz <= 0:
            raise ValueError(f"'mhz' in {frequency_path} must be > 0")
        frequencies.append(Frequency(
            type=str(frequency.get('type', 'unicom')).lower(),
            description=str(frequency.get('description', '')),
            mhz=float(mhz),
        ))

    return AirportFacts(
        code=code.upper(),
        name=str(data['name']),
        elevation=elevation,
        airspace_class=airspace_class,
        tower_controlled=tower_controlled,
        runways=tuple(runways),
        frequencies=tuple(frequencies),
    )
