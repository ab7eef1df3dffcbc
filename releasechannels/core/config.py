from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from releasechannels.domain.models import ServiceConfig

DB_FILE_ENV_VAR = "RELEASES_DB_FILE"
RELOAD_INTERVAL_ENV_VAR = "RELEASES_RELOAD_INTERVAL_SECONDS"
HOST_ENV_VAR = "RELEASES_HOST"
PORT_ENV_VAR = "RELEASES_PORT"
LOG_LEVEL_ENV_VAR = "RELEASES_LOG_LEVEL"

_ENV_FIELDS = {
    DB_FILE_ENV_VAR: "db_file",
    RELOAD_INTERVAL_ENV_VAR: "reload_interval_seconds",
    HOST_ENV_VAR: "host",
    PORT_ENV_VAR: "port",
    LOG_LEVEL_ENV_VAR: "log_level",
}


def load_config(environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
    """
    Build the service configuration from environment variables.

    Unset or blank variables fall back to the ServiceConfig defaults.
    Invalid values raise pydantic.ValidationError.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for env_var, field in _ENV_FIELDS.items():
        raw = env.get(env_var, "").strip()
        if raw:
            values[field] = raw

    if "db_file" in values:
        values["db_file"] = Path(values["db_file"]).expanduser()
    if "log_level" in values:
        values["log_level"] = values["log_level"].upper()

    return ServiceConfig(**values)
