"""
Service configuration loader
"""
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional
import yaml
from pydantic import BaseModel, Field

CONFIG_DIR_NAME = ".contactme"
CONFIG_FILE_NAME = "config.yaml"

# environment variable -> (section, key)
ENV_OVERRIDES: Dict[str, tuple[str, str]] = {
    "CONTACTME_HOST": ("server", "host"),
    "CONTACTME_PORT": ("server", "port"),
    "CONTACTME_ENV": ("server", "environment"),
    "CONTACTME_STORAGE_BACKEND": ("storage", "backend"),
    "CONTACTME_STORAGE_PATH": ("storage", "path"),
    "CONTACTME_LOG_LEVEL": ("logging", "level"),
}


class ServerConfig(BaseModel):
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 3003
    environment: str = "development"
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:4200"]
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


class StorageConfig(BaseModel):
    """Persistence configuration"""
    backend: Literal["memory", "file", "sqlite"] = "file"
    path: str = ".contactme/contacts"


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    directory: Optional[str] = ".contactme/logs"


class RateLimitConfig(BaseModel):
    """Contact form submission rate limit (per client IP)"""
    enabled: bool = True
    max_requests: int = 5
    window_seconds: int = 900


class Settings(BaseModel):
    """Service configuration"""
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    # Internal fields
    config_file: Optional[Path] = None


class SettingsLoader:
    """Load settings from .contactme/config.yaml and the environment"""

    def __init__(self, project_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        self.project_path = project_path or Path.cwd()
        self.config_dir = self.project_path / CONFIG_DIR_NAME
        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self.environ = os.environ if environ is None else environ

    def load(self) -> Settings:
        """Load settings; a missing config file means defaults"""
        config_data: Dict[str, Any] = {}
        if self.config_file.exists():
            with open(self.config_file) as f:
                config_data = yaml.safe_load(f) or {}

        self._apply_env_overrides(config_data)

        settings = Settings(**config_data)
        if self.config_file.exists():
            settings.config_file = self.config_file
        return settings

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> None:
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                config_data.setdefault(section, {})[key] = value

    def write_default(self, force: bool = False) -> Path:
        """Write a default config file

        Args:
            force: Overwrite an existing file

        Returns:
            Path of the config file

        Raises:
            FileExistsError: If the file exists and force is False
        """
        if self.config_file.exists() and not force:
            raise FileExistsError(f"Configuration already exists: {self.config_file}")

        self.config_dir.mkdir(parents=True, exist_ok=True)
        data = Settings().model_dump(exclude={"config_file"})
        with open(self.config_file, "w") as f:
            yaml.safe_dump(data, f, sort_keys=False)
        return self.config_file
