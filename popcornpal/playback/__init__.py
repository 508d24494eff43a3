"""Playback handoff to the media server web client."""

from .browser import BrowsingContext, WebBrowserTab, open_browser_tab, open_external_link
from .launcher import (
    InteractiveAuthPlayback,
    PlaybackOutcome,
    PlaybackSessionLauncher,
    RedirectOnlyPlayback,
    details_url,
    manual_login_url,
    select_playback_strategy,
    token_login_url,
)
from .media_auth import MediaServerAuthError, MediaServerAuthenticator, MediaServerSession, build_media_auth_header
from .modes import EnvironmentProfile, resolve_environment_profile

__all__ = [
    "BrowsingContext",
    "EnvironmentProfile",
    "InteractiveAuthPlayback",
    "MediaServerAuthError",
    "MediaServerAuthenticator",
    "MediaServerSession",
    "PlaybackOutcome",
    "PlaybackSessionLauncher",
    "RedirectOnlyPlayback",
    "WebBrowserTab",
    "build_media_auth_header",
    "details_url",
    "manual_login_url",
    "open_browser_tab",
    "open_external_link",
    "resolve_environment_profile",
    "select_playback_strategy",
    "token_login_url",
]
