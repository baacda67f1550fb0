"""Configuration management for sqlt."""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlt.exceptions import ConfigError


def load_databrickscfg(profile: str = "DEFAULT") -> dict[str, str]:
    """Load credentials from ~/.databrickscfg.

    Args:
        profile: Profile name to load (default: "DEFAULT")

    Returns:
        Dict with host and token when present; empty if the file is missing.

    Raises:
        ConfigError: If the profile doesn't exist
    """
    cfg_path = Path.home() / ".databrickscfg"
    if not cfg_path.exists():
        return {}

    config = configparser.ConfigParser()
    config.read(cfg_path)

    if profile not in config:
        available = [s for s in config.sections() if s != "DEFAULT"] or ["DEFAULT"]
        raise ConfigError(
            f"Profile '{profile}' not found in ~/.databrickscfg. "
            f"Available profiles: {', '.join(available)}"
        )

    section = config[profile]
    result = {}

    if "host" in section:
        host = section["host"].strip()
        if host.startswith("https://"):
            host = host[8:]
        result["host"] = host.rstrip("/")

    if "token" in section:
        result["token"] = section["token"].strip()

    return result


@dataclass
class Config:
    """Configuration for sqlt.

    A database is reached either through a DSN (with optional user and
    password overrides) or, for Databricks, through host/token plus the
    catalog and schema to introspect.
    """

    dsn: Optional[str] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_schema: Optional[str] = None
    catalog: Optional[str] = None
    databricks_host: Optional[str] = None
    databricks_token: Optional[str] = None

    @property
    def uses_databricks(self) -> bool:
        return not self.dsn and bool(self.catalog)

    @classmethod
    def from_env(
        cls,
        *,
        dsn: Optional[str] = None,
        db_user: Optional[str] = None,
        db_password: Optional[str] = None,
        db_schema: Optional[str] = None,
        catalog: Optional[str] = None,
        databricks_host: Optional[str] = None,
        databricks_token: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> "Config":
        """Load configuration from env vars and ~/.databrickscfg, with CLI overrides.

        Priority (highest to lowest):
        1. Explicit parameters (CLI args)
        2. Environment variables
        3. ~/.databrickscfg profile
        """
        databricks_cfg = {}
        profile_name = profile or os.environ.get("DATABRICKS_CONFIG_PROFILE", "DEFAULT")
        try:
            databricks_cfg = load_databrickscfg(profile_name)
        except ConfigError:
            if profile is not None:
                raise

        def resolve(explicit, env_key, cfg_key=None):
            if explicit is not None:
                return explicit
            env_val = os.environ.get(env_key)
            if env_val is not None:
                return env_val
            if cfg_key and cfg_key in databricks_cfg:
                return databricks_cfg[cfg_key]
            return None

        return cls(
            dsn=resolve(dsn, "SQLT_DSN"),
            db_user=resolve(db_user, "SQLT_DB_USER"),
            db_password=resolve(db_password, "SQLT_DB_PASSWORD"),
            db_schema=resolve(db_schema, "SQLT_DB_SCHEMA"),
            catalog=resolve(catalog, "SQLT_CATALOG"),
            databricks_host=resolve(databricks_host, "DATABRICKS_HOST", "host"),
            databricks_token=resolve(databricks_token, "DATABRICKS_TOKEN", "token"),
        )

    def validate_for_introspection(self) -> None:
        """Validate that a database can be reached with this configuration.

        Raises:
            ConfigError: If neither a DSN nor a complete Databricks target is set.
        """
        if self.dsn:
            return

        if not self.catalog:
            raise ConfigError(
                "Missing required configuration:\n"
                "  - dsn (use --dsn or SQLT_DSN), or\n"
                "  - catalog (use --catalog or SQLT_CATALOG) for Databricks"
            )

        missing = []
        if not self.db_schema:
            missing.append("db_schema (use --db-schema or SQLT_DB_SCHEMA)")
        if not self.databricks_host:
            missing.append("databricks_host (use --profile or DATABRICKS_HOST)")
        if not self.databricks_token:
            missing.append("databricks_token (use --profile or DATABRICKS_TOKEN)")

        if missing:
            raise ConfigError(
                "Missing required configuration:\n  - " + "\n  - ".join(missing)
            )
