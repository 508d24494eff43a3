"""
config.py - Configuration model for PopcornPal
"""

import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from rich.console import Console

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()

ENVIRONMENT_VARIABLE = "POPCORNPAL_ENV"


class CatalogConfig(BaseModel):
    base_url: str = "http://localhost:5000/api"
    page_size: int = Field(default=20, ge=1, le=100)
    timeout: int = Field(default=10, description="Per-request timeout in seconds")
    max_concurrency: int = Field(default=5, ge=1)


class SearchConfig(BaseModel):
    """Parameters that control the interactive catalog search."""

    debounce_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Quiet period after the last keystroke before a search is dispatched",
    )


class AssistantConfig(BaseModel):
    match_count: int = Field(default=5, ge=1)
    include_sources: bool = False


class MediaServerConfig(BaseModel):
    url: str = "http://localhost:8096"
    username: str = Field(default="guest", description="Anonymous account used for one-click playback")
    password: str = "guest"
    client_name: str = "PopcornPal"
    device_name: str = "PopcornPal CLI"
    device_id: str = "popcornpal-cli"
    timeout: int = 10


class PlaybackConfig(BaseModel):
    environment: str = Field(
        default="production",
        description="Deployment mode: 'development' logs in programmatically, 'production' redirects to the login page",
    )


class RequestsConfig(BaseModel):
    webhook_url: str = ""


class PopcornPalConfig(BaseModel):
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    media_server: MediaServerConfig = Field(default_factory=MediaServerConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    requests: RequestsConfig = Field(default_factory=RequestsConfig)
    config_path: Optional[Path] = None


def resolve_environment(config: PopcornPalConfig) -> str:
    """Return the deployment mode, letting POPCORNPAL_ENV override the file."""
    override = os.environ.get(ENVIRONMENT_VARIABLE, "").strip()
    if override:
        return override.lower()
    return config.playback.environment.strip().lower()


def load_config(config_path: Path) -> PopcornPalConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Please create config.toml with your catalog and media server settings")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        return PopcornPalConfig(
            catalog=CatalogConfig(**config_data.get("catalog", {})),
            search=SearchConfig(**config_data.get("search", {})),
            assistant=AssistantConfig(**config_data.get("assistant", {})),
            media_server=MediaServerConfig(**config_data.get("media_server", {})),
            playback=PlaybackConfig(**config_data.get("playback", {})),
            requests=RequestsConfig(**config_data.get("requests", {})),
            config_path=config_path,
        )

    except Exception as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
