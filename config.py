"""Configuration loading and validation for exercise-manifest."""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "host": "0.0.0.0",
    "port": 3000,
    "public_dir": "public",
    "cache_ttl_ms": 60000,
    "fetch_timeout": 10.0,
    "data_source_url": None,
    "gdrive_folder_id": None,
    "gdrive_api_key": None,
}

# Environment variable -> config key
ENV_VARS = {
    "HOST": "host",
    "PORT": "port",
    "PUBLIC_DIR": "public_dir",
    "CACHE_TTL_MS": "cache_ttl_ms",
    "FETCH_TIMEOUT": "fetch_timeout",
    "DATA_SOURCE_URL": "data_source_url",
    "GDRIVE_FOLDER_ID": "gdrive_folder_id",
    "GDRIVE_API_KEY": "gdrive_api_key",
}


def _optional(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class Config:
    host: str
    port: int
    public_dir: Path
    cache_ttl_ms: int
    fetch_timeout: float
    data_source_url: str | None = None
    gdrive_folder_id: str | None = None
    gdrive_api_key: str | None = None

    @property
    def bulk_enabled(self) -> bool:
        """Whether manifests are built from the bulk CSV source."""
        return self.data_source_url is not None

    @property
    def folder_enabled(self) -> bool:
        """Whether manifests are built from a remote folder listing."""
        return not self.bulk_enabled and self.gdrive_folder_id is not None

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
        port_override: int | None = None,
        host_override: str | None = None,
        public_dir_override: str | None = None,
        data_source_url_override: str | None = None,
    ) -> "Config":
        """Load configuration from defaults, TOML file, environment and overrides.

        Later sources win: DEFAULTS < config file < environment < CLI overrides.
        Empty values are treated as unset.
        """
        config_data = dict(DEFAULTS)

        path = config_path or DEFAULT_CONFIG_PATH
        if path.exists():
            with open(path, "rb") as f:
                file_config = tomllib.load(f)
                config_data.update(file_config)

        environ = os.environ if env is None else env
        for var, key in ENV_VARS.items():
            value = environ.get(var)
            if value is not None and value.strip():
                config_data[key] = value.strip()

        if port_override is not None:
            config_data["port"] = port_override
        if host_override:
            config_data["host"] = host_override
        if public_dir_override:
            config_data["public_dir"] = public_dir_override
        if data_source_url_override:
            config_data["data_source_url"] = data_source_url_override

        return cls(
            host=str(config_data["host"]),
            port=int(config_data["port"]),
            public_dir=Path(config_data["public_dir"]).expanduser().resolve(),
            cache_ttl_ms=int(config_data["cache_ttl_ms"]),
            fetch_timeout=float(config_data["fetch_timeout"]),
            data_source_url=_optional(config_data["data_source_url"]),
            gdrive_folder_id=_optional(config_data["gdrive_folder_id"]),
            gdrive_api_key=_optional(config_data["gdrive_api_key"]),
        )
