"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


# settings.yaml section -> {yaml key: Settings field}
_YAML_FIELDS: dict[str, dict[str, str]] = {
    "server": {"host": "host", "port": "port"},
    "evaluation": {
        "provider": "evaluation_provider",
        "transcription_provider": "transcription_provider",
        "temperature": "evaluation_temperature",
        "max_tokens": "evaluation_max_tokens",
    },
    "mistral": {"model": "mistral_model", "base_url": "mistral_base_url"},
    "openai": {
        "evaluation_model": "openai_evaluation_model",
        "transcription_model": "openai_transcription_model",
    },
    "assemblyai": {
        "base_url": "assemblyai_base_url",
        "poll_interval_seconds": "assemblyai_poll_interval_seconds",
        "timeout_seconds": "assemblyai_timeout_seconds",
        "lemur_final_model": "lemur_final_model",
    },
    "uploads": {"max_bytes": "max_upload_bytes", "directory": "upload_directory"},
    "progression": {"unlock_threshold": "unlock_threshold"},
}


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        for section, fields in _YAML_FIELDS.items():
            values = data.get(section) or {}
            for key, field_name in fields.items():
                flattened[field_name] = values.get(key)

        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider keys (all optional: a missing key degrades to fallback scoring)
    mistral_api_key: str | None = Field(default=None)
    assemblyai_api_key: str | None = Field(default=None)
    openai_api_key: str | None = Field(default=None)

    # Evaluation
    evaluation_provider: Literal["mistral", "openai", "lemur"] = Field(default="mistral")
    transcription_provider: Literal["assemblyai", "openai"] = Field(default="assemblyai")
    evaluation_temperature: float = Field(default=0.3)
    evaluation_max_tokens: int = Field(default=2048)
    mistral_model: str = Field(default="mistral-large-latest")
    mistral_base_url: str = Field(default="https://api.mistral.ai/v1")
    openai_evaluation_model: str = Field(default="gpt-4o")
    openai_transcription_model: str = Field(default="whisper-1")

    # AssemblyAI
    assemblyai_base_url: str = Field(default="https://api.assemblyai.com")
    assemblyai_poll_interval_seconds: float = Field(default=2.0)
    assemblyai_timeout_seconds: float = Field(default=300.0)
    lemur_final_model: str = Field(default="default")

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Uploads
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)
    upload_directory: Path | None = Field(default=None)

    # Progression
    unlock_threshold: int = Field(default=80)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def uploads_dir(self) -> Path:
        d = self.upload_directory or self.project_root / "data" / "uploads"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
