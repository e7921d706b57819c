"""
config.py - Configuration model for SceneSift
"""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from rich.console import Console
import sys

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()


class ConfigError(ValueError):
    """Raised when a configuration section holds an invalid value."""


class MatchSettings(BaseModel):
    """Similarity cutoffs (0-1) used by the scene matcher."""

    ai_enabled: bool = Field(
        default=False,
        description="Try semantic (embedding) matching before Levenshtein"
    )
    ai_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for a semantic match"
    )
    grouping_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum length ratio for truncated-title matches and result grouping"
    )
    levenshtein_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum edit-distance similarity for a Levenshtein match"
    )


class EmbeddingConfig(BaseModel):
    """Where to reach the sentence-embedding service."""

    url: str = ""
    model: str = "all-MiniLM-L6-v2"
    api_key: str = ""
    timeout: int = 30
    max_concurrency: int = 4
    max_attempts: int = 3

    @property
    def enabled(self) -> bool:
        return bool(self.url)


class SelectionConfig(BaseModel):
    min_group_members: int = Field(
        default=2,
        ge=1,
        description="Unmatched groups with fewer torrents than this are treated as spam"
    )


class SceneSiftConfig(BaseModel):
    matching: MatchSettings = Field(default_factory=MatchSettings)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    log_file: Optional[Path] = None
    debug: bool = False
    config_path: Optional[Path] = None


def build_config(config_data: dict, config_path: Optional[Path] = None) -> SceneSiftConfig:
    """Build a config instance from parsed TOML data."""
    general = config_data.get("general", {})
    log_file = general.get("log_file")
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError(f"general.log_file must be a string, got {type(log_file).__name__}")

    return SceneSiftConfig(
        matching=MatchSettings(**config_data.get("matching", {})),
        embedding=EmbeddingConfig(**config_data.get("embedding", {})),
        selection=SelectionConfig(**config_data.get("selection", {})),
        log_file=Path(log_file) if log_file else None,
        debug=bool(general.get("debug", False)),
        config_path=config_path,
    )


def load_config(config_path: Path) -> SceneSiftConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Please create config.toml with your matching settings")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        return build_config(config_data, config_path=config_path)

    except Exception as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
