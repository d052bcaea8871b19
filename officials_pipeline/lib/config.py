"""Environment configuration for the officials pipeline.

Values come from the process environment, with ``.env.local`` and ``.env``
loaded first when present. Missing required settings are a fatal startup
error: ``load_config`` raises before any jurisdiction is touched.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from officials_pipeline.lib.reference_data import STATE_CODES

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = [
    "CONGRESS_API_KEY",
    "OPENSTATES_API_KEY",
    "DATABASE_URL",
]

SUPPORTED_DATABASE_SCHEMES = ("duckdb://", "http://", "https://", "memory://")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""

    pass


@dataclass
class PipelineConfig:
    congress_api_key: str
    openstates_api_key: str
    database_url: str
    supabase_service_role_key: Optional[str] = None
    congress_api_base_url: str = "https://api.congress.gov/v3"
    openstates_api_base_url: str = "https://v3.openstates.org"
    archive_dir: str = "archives"
    http_timeout: int = 30
    http_max_attempts: int = 1
    jurisdictions: List[str] = field(default_factory=lambda: list(STATE_CODES))
    alert_sns_topic_arn: Optional[str] = None
    aws_region: str = "us-east-1"
    log_level: str = "INFO"


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def load_config(env: Optional[Mapping[str, str]] = None) -> PipelineConfig:
    """Build a PipelineConfig from the environment.

    Args:
        env: Mapping to read instead of os.environ (dotenv files are only
            loaded when reading os.environ)

    Raises:
        ConfigError: If any required variable is missing or a value is invalid
    """
    if env is None:
        load_dotenv(".env.local")
        load_dotenv()
        env = os.environ

    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")

    database_url = env["DATABASE_URL"]
    if not database_url.startswith(SUPPORTED_DATABASE_SCHEMES):
        raise ConfigError(f"Unsupported DATABASE_URL scheme: {database_url.split(':', 1)[0]}")

    service_key = env.get("SUPABASE_SERVICE_ROLE_KEY") or None
    if database_url.startswith(("http://", "https://")) and not service_key:
        raise ConfigError(
            "SUPABASE_SERVICE_ROLE_KEY is required when DATABASE_URL points at Supabase"
        )

    log_level = (env.get("LOG_LEVEL") or PipelineConfig.log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    jurisdictions = list(STATE_CODES)
    if env.get("PIPELINE_JURISDICTIONS"):
        jurisdictions = [
            code.strip().upper()
            for code in env["PIPELINE_JURISDICTIONS"].split(",")
            if code.strip()
        ]
        unknown = [code for code in jurisdictions if code not in STATE_CODES]
        if unknown:
            raise ConfigError(f"Unknown jurisdiction code(s): {', '.join(unknown)}")

    config = PipelineConfig(
        congress_api_key=env["CONGRESS_API_KEY"],
        openstates_api_key=env["OPENSTATES_API_KEY"],
        database_url=database_url,
        supabase_service_role_key=service_key,
        congress_api_base_url=env.get("CONGRESS_API_BASE_URL") or PipelineConfig.congress_api_base_url,
        openstates_api_base_url=env.get("OPENSTATES_API_BASE_URL") or PipelineConfig.openstates_api_base_url,
        archive_dir=env.get("ARCHIVE_DIR") or PipelineConfig.archive_dir,
        http_timeout=_int_setting(env, "HTTP_TIMEOUT_SECONDS", PipelineConfig.http_timeout),
        http_max_attempts=_int_setting(env, "HTTP_MAX_ATTEMPTS", PipelineConfig.http_max_attempts),
        jurisdictions=jurisdictions,
        alert_sns_topic_arn=env.get("ALERT_SNS_TOPIC_ARN") or None,
        aws_region=env.get("AWS_REGION") or PipelineConfig.aws_region,
        log_level=log_level,
    )

    logger.debug(
        f"Loaded config: database={database_url.split(':', 1)[0]}, "
        f"jurisdictions={len(config.jurisdictions)}, archive_dir={config.archive_dir}"
    )
    return config
