import os
from pathlib import Path
from string import Template
from typing import Any, Dict, List, Mapping, Optional, Tuple

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from seo_copilot.models.llm import (
    DEFAULT_MODELS,
    PROVIDER_ENV_PREFIX,
    ProviderName,
    Settings,
)

logger = structlog.get_logger()

REQUIRED_API_KEYS = [f"{prefix}_API_KEY" for prefix in PROVIDER_ENV_PREFIX.values()]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigValidationError(Exception):
    """Configuration validation failed"""

    pass


def validate_environment(
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[bool, List[str]]:
    """Report which provider API keys are absent, without calling anyone.

    Returns:
        (valid, missing) where missing lists the unset variable names
    """
    env = os.environ if environ is None else environ
    missing = [key for key in REQUIRED_API_KEYS if not (env.get(key) or "").strip()]
    return len(missing) == 0, missing


class ConfigManager:
    """Builds Settings from .env, an optional YAML file and the environment.

    Precedence (lowest first): model defaults, YAML file (with ${VAR}
    substitution), environment variables.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ):
        self.config_path = Path(config_path) if config_path else None
        self._environ = environ
        self.env_loaded = not load_env_file
        self._settings: Optional[Settings] = None

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def load_settings(self) -> Settings:
        """Load and validate settings"""
        if self._settings:
            return self._settings

        # 1. Load environment
        if not self.env_loaded:
            load_dotenv()
            self.env_loaded = True

        # 2. Optional YAML overrides
        data = self._read_yaml() if self.config_path else {}

        # 3. Environment
        try:
            self._apply_environment(data)
        except ValueError as e:
            raise ConfigValidationError(f"Invalid environment value: {e}")

        # 4. Validate with Pydantic
        try:
            self._settings = Settings(**data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}")

        configured = [
            name.value
            for name, cfg in self._settings.providers.items()
            if cfg.has_credentials
        ]
        logger.info(
            "config_loaded",
            providers_configured=configured,
            cache_enabled=self._settings.cache.enabled,
        )
        return self._settings

    def _read_yaml(self) -> Dict[str, Any]:
        assert self.config_path is not None
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            raw_content = self.config_path.read_text()
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}")

        try:
            # safe_substitute leaves unknown ${VAR} references untouched
            substituted = Template(raw_content).safe_substitute(self.environ)
            config_data = yaml.safe_load(substituted) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Failed to parse YAML or substitute variables: {e}"
            )

        if not isinstance(config_data, dict):
            raise ConfigValidationError("Configuration root must be a mapping")
        return config_data

    def _env(self, key: str) -> Optional[str]:
        value = self.environ.get(key)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _env_int(self, key: str) -> Optional[int]:
        value = self._env(key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}")

    def _env_bool(self, key: str) -> Optional[bool]:
        value = self._env(key)
        if value is None:
            return None
        if value.lower() in _TRUE_VALUES:
            return True
        if value.lower() in _FALSE_VALUES:
            return False
        raise ValueError(f"{key} must be a boolean, got {value!r}")

    def _apply_environment(self, data: Dict[str, Any]) -> None:
        providers: Dict[str, Dict[str, Any]] = data.setdefault("providers", {}) or {}
        data["providers"] = providers
        routing: Dict[str, Any] = data.setdefault("routing", {}) or {}
        data["routing"] = routing

        timeout_ms = self._env_int("API_TIMEOUT")
        retries = self._env_int("API_RETRIES")
        rate_limit = self._env_int("API_RATE_LIMIT")

        router_order = routing.get("router_order") or [
            ProviderName.CLAUDE.value,
            ProviderName.GEMINI.value,
            ProviderName.OPENAI.value,
        ]

        for name, prefix in PROVIDER_ENV_PREFIX.items():
            entry = dict(providers.get(name.value) or {})
            entry["name"] = name.value

            api_key = self._env(f"{prefix}_API_KEY")
            if api_key is not None:
                entry["api_key"] = api_key

            model = self._env(f"{prefix}_MODEL")
            if model is not None:
                entry["model"] = model
            entry.setdefault("model", DEFAULT_MODELS[name])

            if timeout_ms is not None:
                entry["timeout_seconds"] = timeout_ms / 1000.0
            if retries is not None:
                entry["max_retries"] = retries
            if rate_limit is not None:
                entry["rate_limit_requests"] = rate_limit

            # Router priority follows router order unless set explicitly
            if "priority" not in entry and name.value in router_order:
                entry["priority"] = router_order.index(name.value) + 1

            providers[name.value] = entry

        disabled = self._env("ROUTER_DISABLED_PROVIDERS")
        if disabled is not None:
            names = [n.strip().lower() for n in disabled.split(",") if n.strip()]
            valid = {p.value for p in ProviderName}
            unknown = [n for n in names if n not in valid]
            if unknown:
                raise ValueError(f"ROUTER_DISABLED_PROVIDERS has unknown providers {unknown}")
            routing["initially_disabled"] = names

        cache_dir = self._env("CACHE_DIR")
        if cache_dir is not None:
            cache = data.setdefault("cache", {}) or {}
            cache["cache_dir"] = cache_dir
            data["cache"] = cache

        cache_enabled = self._env_bool("CACHE_ENABLED")
        if cache_enabled is not None:
            cache = data.setdefault("cache", {}) or {}
            cache["enabled"] = cache_enabled
            data["cache"] = cache

        log_level = self._env("LOG_LEVEL")
        if log_level is not None:
            data["log_level"] = log_level.upper()

        log_json = self._env_bool("LOG_JSON")
        if log_json is not None:
            data["log_json"] = log_json
