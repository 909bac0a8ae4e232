"""Processor configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- Kafka connection, topics and originator
- Submission and Challenge API endpoints
- Auth0 machine-to-machine credentials
- Relevance filters (challenge sub tracks, review type ids)
- Legacy database and observability settings

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
Every recognized option can also be set directly through its environment
variable (e.g. SUBMISSION_API_URL), which takes priority over the YAML value.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replacer(match):
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(match.group(1), default_value)

        return _ENV_PATTERN.sub(replacer, data)
    else:
        return data


def split_csv(value: str | List[str] | None) -> List[str]:
    """Split a comma-separated option into trimmed, non-empty items."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if str(item).strip()]


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# Default config file: config/config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"


@dataclass
class ProcessorConfig:
    """Legacy MM processor configuration.

    Configuration structure:
        logging: {...}           # Level, JSON output, optional log directory
        kafka:
          url / group_id / client_cert / client_cert_key
          topics: {new_submission, update_submission}
          new_submission_originator
        submission_api: {url, timeout_ms}
        challenge_api: {info_url}         # Template containing {cid}
        auth0: {url, audience, client_id, client_secret, proxy_server_url, token_cache_time_ms}
        filters: {challenge_subtrack, payload_types}
        legacy_db: {url}
        metrics: {port}

    All timing values in milliseconds unless otherwise noted.
    """

    # =========================================================================
    # LOGGING
    # =========================================================================
    log_level: str = "debug"
    log_json: bool = True
    log_dir: str = ""

    # =========================================================================
    # KAFKA
    # =========================================================================
    kafka_url: str = "localhost:9092"
    kafka_group_id: str = "legacy-mm-processor-group"
    kafka_client_cert: str = ""
    kafka_client_cert_key: str = ""
    new_submission_topic: str = "submission.notification.create"
    update_submission_topic: str = "submission.notification.update"
    new_submission_originator: str = "submission-api"

    # =========================================================================
    # ENRICHMENT APIS
    # =========================================================================
    submission_api_url: str = "http://localhost:3010/api/v5"
    submission_timeout_ms: int = 10000
    challenge_info_api: str = "http://localhost:3011/v3/challenges?filter=id={cid}"

    # =========================================================================
    # AUTH0 (machine-to-machine, optional)
    # =========================================================================
    auth0_url: str = ""
    auth0_audience: str = ""
    auth0_client_id: str = ""
    auth0_client_secret: str = ""
    auth0_proxy_server_url: str = ""
    token_cache_time_ms: int = 86400000

    # =========================================================================
    # RELEVANCE FILTERS
    # =========================================================================
    challenge_subtrack: str = "MARATHON_MATCH, DEVELOP_MARATHON_MATCH"
    payload_types: str = "bcf2b43b-20df-44d1-afd3-7fc9798dfcae"

    # =========================================================================
    # LEGACY STORE AND OBSERVABILITY
    # =========================================================================
    legacy_db_url: str = ""
    metrics_port: int = 0

    @property
    def topics(self) -> List[str]:
        return [self.new_submission_topic, self.update_submission_topic]

    @property
    def challenge_subtracks(self) -> List[str]:
        return split_csv(self.challenge_subtrack)

    @property
    def payload_type_ids(self) -> List[str]:
        return split_csv(self.payload_types)

    @property
    def submission_timeout_seconds(self) -> float:
        return self.submission_timeout_ms / 1000

    @property
    def token_cache_time_seconds(self) -> float:
        return self.token_cache_time_ms / 1000

    @property
    def m2m_enabled(self) -> bool:
        """Machine tokens are attached only when Auth0 is fully configured."""
        return bool(
            self.auth0_url
            and self.auth0_audience
            and self.auth0_client_id
            and self.auth0_client_secret
        )

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []

        required = {
            "KAFKA_URL": self.kafka_url,
            "KAFKA_GROUP_ID": self.kafka_group_id,
            "KAFKA_NEW_SUBMISSION_TOPIC": self.new_submission_topic,
            "KAFKA_UPDATE_SUBMISSION_TOPIC": self.update_submission_topic,
            "KAFKA_NEW_SUBMISSION_ORIGINATOR": self.new_submission_originator,
            "SUBMISSION_API_URL": self.submission_api_url,
            "CHALLENGE_INFO_API": self.challenge_info_api,
        }
        for name, value in required.items():
            if not value:
                errors.append(f"{name} is required")

        if self.submission_api_url and not self.submission_api_url.startswith(("http://", "https://")):
            errors.append(f"SUBMISSION_API_URL must start with http:// or https://, got: {self.submission_api_url!r}")

        if self.challenge_info_api and "{cid}" not in self.challenge_info_api:
            errors.append("CHALLENGE_INFO_API must contain the {cid} placeholder")

        if self.submission_timeout_ms <= 0:
            errors.append(f"SUBMISSION_TIMEOUT must be > 0, got {self.submission_timeout_ms}")

        if not self.challenge_subtracks:
            errors.append("CHALLENGE_SUBTRACK must list at least one sub track")

        if not self.payload_type_ids:
            errors.append("PAYLOAD_TYPES must list at least one review type id")

        if bool(self.kafka_client_cert) != bool(self.kafka_client_cert_key):
            errors.append("KAFKA_CLIENT_CERT and KAFKA_CLIENT_CERT_KEY must be set together")

        if (self.auth0_client_id or self.auth0_client_secret) and not self.m2m_enabled:
            errors.append(
                "AUTH0_URL, AUTH0_AUDIENCE, AUTH0_CLIENT_ID and AUTH0_CLIENT_SECRET must be set together"
            )

        return errors


# (field, environment variable, yaml section, yaml key)
_OPTIONS: List[tuple[str, str, str, str]] = [
    ("log_level", "LOG_LEVEL", "logging", "level"),
    ("log_json", "LOG_JSON", "logging", "json"),
    ("log_dir", "LOG_DIR", "logging", "dir"),
    ("kafka_url", "KAFKA_URL", "kafka", "url"),
    ("kafka_group_id", "KAFKA_GROUP_ID", "kafka", "group_id"),
    ("kafka_client_cert", "KAFKA_CLIENT_CERT", "kafka", "client_cert"),
    ("kafka_client_cert_key", "KAFKA_CLIENT_CERT_KEY", "kafka", "client_cert_key"),
    ("new_submission_topic", "KAFKA_NEW_SUBMISSION_TOPIC", "kafka", "new_submission_topic"),
    ("update_submission_topic", "KAFKA_UPDATE_SUBMISSION_TOPIC", "kafka", "update_submission_topic"),
    ("new_submission_originator", "KAFKA_NEW_SUBMISSION_ORIGINATOR", "kafka", "new_submission_originator"),
    ("submission_api_url", "SUBMISSION_API_URL", "submission_api", "url"),
    ("submission_timeout_ms", "SUBMISSION_TIMEOUT", "submission_api", "timeout_ms"),
    ("challenge_info_api", "CHALLENGE_INFO_API", "challenge_api", "info_url"),
    ("auth0_url", "AUTH0_URL", "auth0", "url"),
    ("auth0_audience", "AUTH0_AUDIENCE", "auth0", "audience"),
    ("auth0_client_id", "AUTH0_CLIENT_ID", "auth0", "client_id"),
    ("auth0_client_secret", "AUTH0_CLIENT_SECRET", "auth0", "client_secret"),
    ("auth0_proxy_server_url", "AUTH0_PROXY_SERVER_URL", "auth0", "proxy_server_url"),
    ("token_cache_time_ms", "TOKEN_CACHE_TIME", "auth0", "token_cache_time_ms"),
    ("challenge_subtrack", "CHALLENGE_SUBTRACK", "filters", "challenge_subtrack"),
    ("payload_types", "PAYLOAD_TYPES", "filters", "payload_types"),
    ("legacy_db_url", "LEGACY_DB_URL", "legacy_db", "url"),
    ("metrics_port", "METRICS_PORT", "metrics", "port"),
]

_INT_FIELDS = frozenset({"submission_timeout_ms", "token_cache_time_ms", "metrics_port"})
_BOOL_FIELDS = frozenset({"log_json"})


def _coerce(field_name: str, value: Any) -> Any:
    if field_name in _INT_FIELDS:
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{field_name} must be an integer, got {value!r}") from e
    if field_name in _BOOL_FIELDS:
        return _as_bool(value)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return "" if value is None else str(value)


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    validate: bool = True,
) -> ProcessorConfig:
    """Load processor configuration.

    Priority (highest to lowest):
    1. overrides (field name -> value)
    2. Environment variables (SUBMISSION_API_URL, CHALLENGE_SUBTRACK, ...)
    3. YAML configuration file
    4. Dataclass defaults

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ValueError: If validation is requested and the configuration is invalid
    """
    if config_path is not None and not Path(config_path).exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_FILE
    logger.info("Loading configuration", extra={"config_path": str(path)})
    yaml_data = _expand_env_vars(load_yaml(path))

    values: Dict[str, Any] = {}
    for field_name, env_name, section, key in _OPTIONS:
        env_value = os.getenv(env_name)
        if env_value is not None and env_value != "":
            values[field_name] = _coerce(field_name, env_value)
            continue
        section_data = yaml_data.get(section) or {}
        if key in section_data and section_data[key] is not None:
            values[field_name] = _coerce(field_name, section_data[key])

    if overrides:
        logger.debug("Applying overrides", extra={"fields": sorted(overrides)})
        for field_name, value in overrides.items():
            values[field_name] = _coerce(field_name, value)

    config = ProcessorConfig(**values)

    if validate:
        errors = config.validate()
        if errors:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        logger.debug("Configuration validation passed")

    if not config.m2m_enabled:
        logger.warning("Auth0 machine token not configured, Submission API calls are unauthenticated")

    return config


_processor_config: Optional[ProcessorConfig] = None


def get_config() -> ProcessorConfig:
    """Get or load the singleton processor config instance."""
    global _processor_config
    if _processor_config is None:
        _processor_config = load_config()
    return _processor_config


def set_config(config: ProcessorConfig) -> None:
    """Set the singleton processor config instance (useful for testing)."""
    global _processor_config
    _processor_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _processor_config
    _processor_config = None
