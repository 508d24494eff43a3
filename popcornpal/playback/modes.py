"""Deployment environments and the playback mode each one uses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PlaybackMode = Literal["interactive_auth", "redirect_only"]


@dataclass(frozen=True)
class EnvironmentProfile:
    playback_mode: PlaybackMode
    description: str


_ENVIRONMENT_PROFILES: dict[str, EnvironmentProfile] = {
    "development": EnvironmentProfile(
        playback_mode="interactive_auth",
        description="log in to the media server automatically",
    ),
    "production": EnvironmentProfile(
        playback_mode="redirect_only",
        description="send the browser to the media server login page",
    ),
}


def _normalize_environment(environment: str | None) -> str:
    return (environment or "").strip().lower()


def resolve_environment_profile(environment: str | None) -> EnvironmentProfile:
    normalized = _normalize_environment(environment)
    profile = _ENVIRONMENT_PROFILES.get(normalized)
    if profile is not None:
        return profile
    supported = ", ".join(sorted(_ENVIRONMENT_PROFILES))
    raise ValueError(
        f"Unsupported environment '{environment}'. Supported environments: {supported}."
    )
