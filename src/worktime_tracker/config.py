"""
Configuration management for the Work-Time Tracker

Handles configuration with sensible defaults, an optional JSON config file
and environment overrides.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, asdict, field
import logging

DEFAULT_WORK_DAYS = "1,2,3,4,5"
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable ("1"/"true"/"yes" are truthy)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = "sqlite:///./worktime_tracker.db"
    echo: bool = False
    pool_pre_ping: bool = True
    log_queries: bool = False  # Enable query logging for performance analysis


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 3210
    debug: bool = False
    auto_reload: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class AppConfig:
    """Main application configuration."""

    app_name: str = "Work-Time Tracker"
    version: str = "1.0.0"
    description: str = "Time tracking with daily targets, work debt and work advance"

    # Trackers created without an explicit calendar use these weekdays (Sunday=0)
    default_work_days: str = DEFAULT_WORK_DAYS

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"  # Directory for log files

    # Environment
    is_development: bool = False


@dataclass
class WorkTimeConfig:
    """Complete configuration for the Work-Time Tracker."""

    app: AppConfig
    server: ServerConfig
    database: DatabaseConfig

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "app": asdict(self.app),
            "server": asdict(self.server),
            "database": asdict(self.database),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkTimeConfig":
        """Create from dictionary."""
        return cls(
            app=AppConfig(**data.get("app", {})),
            server=ServerConfig(**data.get("server", {})),
            database=DatabaseConfig(**data.get("database", {})),
        )


class ConfigManager:
    """Manages configuration loading, saving, and environment overrides."""

    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[WorkTimeConfig] = None

    def detect_environment(self) -> Dict[str, Any]:
        """Collect overrides from environment variables."""
        env_info: Dict[str, Any] = {}

        env_info["debug"] = _env_flag("WORKTIME_DEBUG", False)
        env_info["is_development"] = os.getenv("WORKTIME_ENV", "development") == "development"
        env_info["database_url"] = os.getenv("WORKTIME_DATABASE_URL") or os.getenv(
            "DATABASE_URL"
        )
        env_info["log_level"] = os.getenv("WORKTIME_LOG_LEVEL")
        env_info["log_to_file"] = os.getenv("WORKTIME_LOG_TO_FILE")
        env_info["log_dir"] = os.getenv("WORKTIME_LOG_DIR")
        env_info["host"] = os.getenv("WORKTIME_HOST")
        env_info["port"] = os.getenv("WORKTIME_PORT")
        env_info["cors_origins"] = os.getenv("WORKTIME_CORS_ORIGINS")
        env_info["default_work_days"] = os.getenv("WORKTIME_DEFAULT_WORK_DAYS")

        return env_info

    def get_config_file_path(self) -> Path:
        """Get the path for the config file."""
        explicit = os.getenv("WORKTIME_CONFIG_FILE")
        if explicit:
            return Path(explicit)
        return Path.cwd() / "data" / "config.json"

    def _apply_environment(self, config: WorkTimeConfig) -> WorkTimeConfig:
        """Apply environment overrides on top of a loaded or default config."""
        env_info = self.detect_environment()

        config.app.is_development = env_info["is_development"]
        if env_info["debug"]:
            config.server.debug = True
            config.app.log_level = "DEBUG"
        if env_info["database_url"]:
            config.database.url = env_info["database_url"]
        if env_info["log_level"]:
            config.app.log_level = env_info["log_level"].strip().upper()
        if env_info["log_to_file"] is not None:
            config.app.log_to_file = _env_flag("WORKTIME_LOG_TO_FILE", True)
        if env_info["log_dir"]:
            config.app.log_dir = env_info["log_dir"]
        if env_info["host"]:
            config.server.host = env_info["host"]
        if env_info["port"]:
            try:
                config.server.port = int(env_info["port"])
            except ValueError:
                logging.warning(f"Ignoring invalid WORKTIME_PORT value: {env_info['port']}")
        if env_info["cors_origins"]:
            config.server.cors_origins = [
                origin.strip()
                for origin in env_info["cors_origins"].split(",")
                if origin.strip()
            ]
        if env_info["default_work_days"]:
            config.app.default_work_days = env_info["default_work_days"]

        return config

    def create_default_config(self) -> WorkTimeConfig:
        """Create default configuration with environment overrides applied."""
        config = WorkTimeConfig(
            app=AppConfig(),
            server=ServerConfig(),
            database=DatabaseConfig(),
        )
        return self._apply_environment(config)

    def load_config(self) -> WorkTimeConfig:
        """Load configuration from file or create default."""
        if self.config is not None:
            return self.config

        self.config_file = self.get_config_file_path()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)

                self.config = self._apply_environment(WorkTimeConfig.from_dict(data))
                logging.info(f"Loaded configuration from {self.config_file}")

            except (OSError, ValueError, TypeError) as e:
                logging.warning(f"Failed to load config from {self.config_file}: {e}")
                logging.info("Creating default configuration")
                self.config = self.create_default_config()
        else:
            self.config = self.create_default_config()

        return self.config

    def save_config(self, config: Optional[WorkTimeConfig] = None) -> bool:
        """Save configuration to file."""
        if config is None:
            config = self.config

        if config is None:
            logging.error("No configuration to save")
            return False

        try:
            if self.config_file is None:
                self.config_file = self.get_config_file_path()

            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)

            logging.info(f"Saved configuration to {self.config_file}")
            return True

        except OSError as e:
            logging.error(f"Failed to save config to {self.config_file}: {e}")
            return False

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of warnings/errors."""
        config = self.load_config()
        issues = []

        if config.app.log_level.upper() not in VALID_LOG_LEVELS:
            issues.append(f"Unknown log level: {config.app.log_level}")

        if not 0 < config.server.port < 65536:
            issues.append(f"Server port out of range: {config.server.port}")

        from .domain.work_days import parse_work_days

        try:
            parse_work_days(config.app.default_work_days)
        except ValueError as e:
            issues.append(f"Invalid default work days: {e}")

        # Check database file is writable
        db_url = config.database.url
        if db_url.startswith("sqlite:///") and ":memory:" not in db_url:
            db_path = Path(db_url.replace("sqlite:///", ""))
            db_dir = db_path.parent
            if db_dir.exists() and not os.access(db_dir, os.W_OK):
                issues.append(f"Database directory is not writable: {db_dir}")

        return issues


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> WorkTimeConfig:
    """Get the current configuration."""
    return config_manager.load_config()

