"""
Configuration Management for speech-gateway.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Frozen dataclass configuration objects
    - YAML file loading with environment variable overrides
    - Optional secret-vault overlay (see core/secrets.py)
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Secret vault (when vault.uri / SPEECH_GW_VAULT_URI is set)
    2. Environment variables (SPEECH_GW_SPEECH_KEY, ...)
    3. YAML config file (config/settings.yaml)
    4. Defaults class values

Example settings.yaml:
    speech:
      region: westeurope
      voice_name: en-GB-SoniaNeural
      transport: rest

    identity:
      tenant_id: 00000000-0000-0000-0000-000000000000
      client_id: 11111111-1111-1111-1111-111111111111
      audience: api://speech-gateway

    cors:
      allowed_origins:
        - https://app.example.com

The resulting GatewayConfig is built once at startup and passed to the
components that need it; nothing mutates it afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from speech_gateway.core.errors import ConfigurationError


class ConfigValidationError(ConfigurationError):
    """
    Raised when configuration validation fails.

    Thrown when a configuration value is outside acceptable bounds or
    not one of the supported choices.
    """
    pass


# Audio output formats accepted by the speech service, with the byte rate
# used to estimate duration when the vendor does not report one.
OUTPUT_FORMAT_BYTES_PER_SECOND: Dict[str, int] = {
    "audio-16khz-32kbitrate-mono-mp3": 4_000,
    "audio-16khz-64kbitrate-mono-mp3": 8_000,
    "audio-16khz-128kbitrate-mono-mp3": 16_000,
    "audio-24khz-48kbitrate-mono-mp3": 6_000,
    "audio-24khz-96kbitrate-mono-mp3": 12_000,
    "audio-24khz-160kbitrate-mono-mp3": 20_000,
    "audio-48khz-96kbitrate-mono-mp3": 12_000,
    "audio-48khz-192kbitrate-mono-mp3": 24_000,
    "riff-16khz-16bit-mono-pcm": 32_000,
    "riff-24khz-16bit-mono-pcm": 48_000,
    "riff-48khz-16bit-mono-pcm": 96_000,
}

TRANSPORTS = ("rest", "sdk")
DURATION_STRATEGIES = ("reported", "estimated")


class Defaults:
    """
    Centralized default configuration values.

    Used when no override is provided via YAML, environment or vault.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Speech Service
    # ─────────────────────────────────────────────────────────────────────────
    SPEECH_REGION = "eastus"
    SPEECH_VOICE_NAME = "en-US-AriaNeural"
    SPEECH_LANGUAGE = "en-US"
    SPEECH_OUTPUT_FORMAT = "audio-16khz-128kbitrate-mono-mp3"
    SPEECH_TRANSPORT = "rest"
    SPEECH_DURATION_STRATEGY = "reported"
    SPEECH_TIMEOUT_S = 30.0

    # ─────────────────────────────────────────────────────────────────────────
    # Identity Provider
    # ─────────────────────────────────────────────────────────────────────────
    IDENTITY_INSTANCE = "https://login.microsoftonline.com/"
    IDENTITY_REQUIRED_SCOPE = "tts.convert"

    # ─────────────────────────────────────────────────────────────────────────
    # CORS
    # ─────────────────────────────────────────────────────────────────────────
    CORS_ALLOWED_ORIGINS = ("https://localhost:7047", "http://localhost:5197")

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_LEVEL = 2               # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG
    LOGGING_JSONL_FILE = "speech-gateway.jsonl"
    LOGGING_ROTATE_MAX_BYTES = 10 * 1024 * 1024
    LOGGING_ROTATE_BACKUP_COUNT = 5

    SETTINGS_PATH = "config/settings.yaml"


# Environment variable -> (section, key) in the raw settings dict
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "SPEECH_GW_SPEECH_KEY": ("speech", "key"),
    "SPEECH_GW_SPEECH_REGION": ("speech", "region"),
    "SPEECH_GW_SPEECH_VOICE": ("speech", "voice_name"),
    "SPEECH_GW_SPEECH_LANGUAGE": ("speech", "language"),
    "SPEECH_GW_SPEECH_OUTPUT_FORMAT": ("speech", "output_format"),
    "SPEECH_GW_SPEECH_TRANSPORT": ("speech", "transport"),
    "SPEECH_GW_SPEECH_DURATION": ("speech", "duration_strategy"),
    "SPEECH_GW_SPEECH_ENDPOINT": ("speech", "endpoint"),
    "SPEECH_GW_SPEECH_TIMEOUT_S": ("speech", "timeout_s"),
    "SPEECH_GW_IDENTITY_INSTANCE": ("identity", "instance"),
    "SPEECH_GW_IDENTITY_DOMAIN": ("identity", "domain"),
    "SPEECH_GW_IDENTITY_TENANT_ID": ("identity", "tenant_id"),
    "SPEECH_GW_IDENTITY_CLIENT_ID": ("identity", "client_id"),
    "SPEECH_GW_IDENTITY_AUDIENCE": ("identity", "audience"),
    "SPEECH_GW_IDENTITY_SCOPES": ("identity", "scopes"),
    "SPEECH_GW_IDENTITY_REQUIRED_SCOPE": ("identity", "required_scope"),
    "SPEECH_GW_CORS_ORIGINS": ("cors", "allowed_origins"),
    "SPEECH_GW_VAULT_URI": ("vault", "uri"),
    "SPEECH_GW_LOG_LEVEL": ("logging", "level"),
    "SPEECH_GW_LOG_DIR": ("logging", "log_dir"),
    "SPEECH_GW_JSONL_FILE": ("logging", "jsonl_file"),
    "SPEECH_GW_LOG_ROTATE_BYTES": ("logging", "rotate_max_bytes"),
    "SPEECH_GW_LOG_ROTATE_BACKUP": ("logging", "rotate_backup_count"),
}


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Return a loggable form of a secret: a short prefix followed by ***."""
    if not value:
        return "<unset>"
    return f"{value[:visible]}***"


@dataclass(frozen=True)
class SpeechConfig:
    """
    Vendor credentials and synthesis options.

    The key is never logged in full; use masked_key in diagnostics.
    """
    key: str = ""
    region: str = Defaults.SPEECH_REGION
    voice_name: str = Defaults.SPEECH_VOICE_NAME
    language: str = Defaults.SPEECH_LANGUAGE
    output_format: str = Defaults.SPEECH_OUTPUT_FORMAT
    transport: str = Defaults.SPEECH_TRANSPORT
    duration_strategy: str = Defaults.SPEECH_DURATION_STRATEGY
    endpoint: Optional[str] = None
    timeout_s: float = Defaults.SPEECH_TIMEOUT_S

    @property
    def rest_endpoint(self) -> str:
        """Synthesis URL for the REST transport."""
        if self.endpoint:
            return self.endpoint
        return f"https://{self.region}.tts.speech.microsoft.com/cognitiveservices/v1"

    @property
    def bytes_per_second(self) -> int:
        """Byte rate of the configured output format."""
        return OUTPUT_FORMAT_BYTES_PER_SECOND[self.output_format]

    @property
    def masked_key(self) -> str:
        return mask_secret(self.key)

    def __repr__(self) -> str:
        return (
            f"SpeechConfig(key={self.masked_key!r}, region={self.region!r}, "
            f"voice_name={self.voice_name!r}, transport={self.transport!r})"
        )


@dataclass(frozen=True)
class IdentityConfig:
    """
    Identity-provider (Microsoft Entra ID) settings used to verify tokens.

    Attributes:
        instance: Login host, e.g. "https://login.microsoftonline.com/".
        domain: Tenant domain, e.g. "contoso.onmicrosoft.com".
        tenant_id: Tenant GUID.
        client_id: Client ID of this API's app registration.
        audience: Expected token audience (e.g. "api://speech-gateway").
        scopes: Scopes exposed by the API registration (informational).
        required_scope: Scope a caller must hold to synthesize.
    """
    instance: str = Defaults.IDENTITY_INSTANCE
    domain: str = ""
    tenant_id: str = ""
    client_id: str = ""
    audience: str = ""
    scopes: str = ""
    required_scope: str = Defaults.IDENTITY_REQUIRED_SCOPE

    @property
    def configured(self) -> bool:
        return bool(self.tenant_id and self.client_id)

    @property
    def authority(self) -> str:
        return f"{self.instance.rstrip('/')}/{self.tenant_id}/v2.0"

    @property
    def jwks_uri(self) -> str:
        return f"{self.instance.rstrip('/')}/{self.tenant_id}/discovery/v2.0/keys"

    @property
    def valid_audiences(self) -> Tuple[str, ...]:
        return tuple(a for a in (self.audience, self.client_id) if a)


@dataclass(frozen=True)
class CorsConfig:
    """Allowed cross-origin callers. Credentials are always allowed."""
    allowed_origins: Tuple[str, ...] = Defaults.CORS_ALLOWED_ORIGINS


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, errors only
        2 = NORMAL: Request lifecycle (default)
        3 = VERBOSE: Per-stage timing, caller identity
        4 = DEBUG: Internal state, full SSML
    """
    level: int = Defaults.LOGGING_LEVEL
    log_dir: Optional[str] = None  # None disables the JSONL file
    jsonl_file: str = Defaults.LOGGING_JSONL_FILE
    rotate_max_bytes: int = Defaults.LOGGING_ROTATE_MAX_BYTES
    rotate_backup_count: int = Defaults.LOGGING_ROTATE_BACKUP_COUNT

    def as_dict(self) -> Dict[str, Any]:
        """Settings in the shape configure_logging() expects."""
        return {
            "level": self.level,
            "log_dir": self.log_dir,
            "jsonl_file": self.jsonl_file,
            "rotate_max_bytes": self.rotate_max_bytes,
            "rotate_backup_count": self.rotate_backup_count,
        }


@dataclass(frozen=True)
class GatewayConfig:
    """
    Validated, immutable configuration for the whole process.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = GatewayConfig.from_settings(settings)
        print(config.speech.region)
    """
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    cors: CorsConfig = field(default_factory=CorsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    vault_uri: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GatewayConfig":
        """
        Create GatewayConfig from Settings with validation.

        Args:
            settings: Raw Settings object (YAML + environment + vault).

        Returns:
            Validated GatewayConfig instance.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Speech configuration
        # ─────────────────────────────────────────────────────────────────────
        speech_raw = raw.get("speech") or {}
        speech = SpeechConfig(
            key=str(speech_raw.get("key") or ""),
            region=str(speech_raw.get("region") or Defaults.SPEECH_REGION),
            voice_name=str(speech_raw.get("voice_name") or Defaults.SPEECH_VOICE_NAME),
            language=str(speech_raw.get("language") or Defaults.SPEECH_LANGUAGE),
            output_format=str(speech_raw.get("output_format") or Defaults.SPEECH_OUTPUT_FORMAT),
            transport=str(speech_raw.get("transport") or Defaults.SPEECH_TRANSPORT).lower(),
            duration_strategy=str(
                speech_raw.get("duration_strategy") or Defaults.SPEECH_DURATION_STRATEGY
            ).lower(),
            endpoint=speech_raw.get("endpoint") or None,
            timeout_s=cls._coerce_number(
                "speech.timeout_s", speech_raw.get("timeout_s", Defaults.SPEECH_TIMEOUT_S), float
            ),
        )
        cls._validate_choice("speech.transport", speech.transport, TRANSPORTS)
        cls._validate_choice("speech.duration_strategy", speech.duration_strategy, DURATION_STRATEGIES)
        cls._validate_choice("speech.output_format", speech.output_format, tuple(OUTPUT_FORMAT_BYTES_PER_SECOND))
        cls._validate_positive("speech.timeout_s", speech.timeout_s)

        # ─────────────────────────────────────────────────────────────────────
        # Identity configuration
        # ─────────────────────────────────────────────────────────────────────
        identity_raw = raw.get("identity") or {}
        identity = IdentityConfig(
            instance=str(identity_raw.get("instance") or Defaults.IDENTITY_INSTANCE),
            domain=str(identity_raw.get("domain") or ""),
            tenant_id=str(identity_raw.get("tenant_id") or ""),
            client_id=str(identity_raw.get("client_id") or ""),
            audience=str(identity_raw.get("audience") or ""),
            scopes=str(identity_raw.get("scopes") or ""),
            required_scope=str(identity_raw.get("required_scope") or Defaults.IDENTITY_REQUIRED_SCOPE),
        )

        # ─────────────────────────────────────────────────────────────────────
        # CORS configuration
        # ─────────────────────────────────────────────────────────────────────
        cors_raw = raw.get("cors") or {}
        origins = cors_raw.get("allowed_origins")
        if origins is None:
            allowed = Defaults.CORS_ALLOWED_ORIGINS
        elif isinstance(origins, str):
            allowed = tuple(o.strip() for o in origins.split(",") if o.strip())
        else:
            allowed = tuple(str(o).strip() for o in origins if str(o).strip())
        cors = CorsConfig(allowed_origins=allowed)

        # ─────────────────────────────────────────────────────────────────────
        # Logging configuration
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging") or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = cls._coerce_number("logging.level", log_level_raw, int)
        log_dir = logging_raw.get("log_dir")
        logging_cfg = LoggingConfig(
            level=log_level,
            log_dir=str(log_dir) if log_dir else None,
            jsonl_file=str(logging_raw.get("jsonl_file") or Defaults.LOGGING_JSONL_FILE),
            rotate_max_bytes=cls._coerce_number(
                "logging.rotate_max_bytes",
                logging_raw.get("rotate_max_bytes", Defaults.LOGGING_ROTATE_MAX_BYTES),
                int,
            ),
            rotate_backup_count=cls._coerce_number(
                "logging.rotate_backup_count",
                logging_raw.get("rotate_backup_count", Defaults.LOGGING_ROTATE_BACKUP_COUNT),
                int,
            ),
        )
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)
        cls._validate_positive("logging.rotate_max_bytes", logging_cfg.rotate_max_bytes)

        vault_raw = raw.get("vault") or {}

        return cls(
            speech=speech,
            identity=identity,
            cors=cors,
            logging=logging_cfg,
            vault_uri=vault_raw.get("uri") or None,
        )

    @staticmethod
    def _coerce_number(name: str, value: Any, kind: type) -> Any:
        """Convert a raw value with int/float, failing with ConfigValidationError."""
        try:
            return kind(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{name} must be a number, got {value!r}") from None

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")

    @staticmethod
    def _validate_choice(name: str, value: str, choices: Tuple[str, ...]) -> None:
        """Validate that a value is one of the supported choices."""
        if value not in choices:
            raise ConfigValidationError(
                f"{name} must be one of {', '.join(choices)}, got {value!r}"
            )


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container holding the merged raw dictionary.

    This is the raw settings object before validation. Use
    get_gateway_config() to get the validated GatewayConfig.
    """
    raw: Dict[str, Any]

    @property
    def vault_uri(self) -> Optional[str]:
        return (self.raw.get("vault") or {}).get("uri") or None

    def get_gateway_config(self) -> GatewayConfig:
        """
        Get validated GatewayConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return GatewayConfig.from_settings(self)


def apply_env_overrides(raw: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Overlay SPEECH_GW_* environment variables onto a raw settings dict.

    Empty variables are ignored. Returns the same dict for chaining.
    """
    env = os.environ if environ is None else environ
    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            raw.setdefault(section, {})
            if raw[section] is None:
                raw[section] = {}
            raw[section][key] = value
    return raw


def load_settings(path: Optional[str] = None, use_vault: bool = True) -> Settings:
    """
    Load settings from YAML, environment and (optionally) the secret vault.

    When path is None, SPEECH_GW_SETTINGS or config/settings.yaml is used
    and a missing file means "defaults only". An explicit path must exist.

    Args:
        path: Path to the YAML configuration file.
        use_vault: Apply vault secrets when a vault URI is configured.

    Returns:
        Settings object with the merged configuration.

    Raises:
        FileNotFoundError: If an explicit settings file doesn't exist.
        ConfigurationError: If the vault is configured but unreadable.
    """
    explicit = path is not None
    p = Path(path or os.getenv("SPEECH_GW_SETTINGS", Defaults.SETTINGS_PATH))

    raw: Dict[str, Any] = {}
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    apply_env_overrides(raw)

    settings = Settings(raw=raw)
    if use_vault and settings.vault_uri:
        from speech_gateway.core.secrets import apply_vault_secrets
        settings = Settings(raw=apply_vault_secrets(raw, settings.vault_uri))

    return settings


def load_config(path: Optional[str] = None) -> GatewayConfig:
    """Load settings and return the validated GatewayConfig."""
    return load_settings(path).get_gateway_config()
