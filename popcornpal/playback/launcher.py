"""Open a media-server playback session in a browser tab."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol
from urllib.parse import quote, urlencode

from popcornpal import logger
from popcornpal.notices import Notice
from popcornpal.playback.browser import BrowsingContext, ContextOpener, open_browser_tab
from popcornpal.playback.media_auth import MediaServerAuthError, MediaServerAuthenticator
from popcornpal.playback.modes import PlaybackMode, resolve_environment_profile


def token_login_url(server: str, token: str, user_id: str, movie_id: str | None = None) -> str:
    params = {"token": token, "userId": user_id}
    if movie_id:
        params["movieId"] = movie_id
    return f"{server.rstrip('/')}/web/token-login.html?{urlencode(params)}"


def manual_login_url(server: str) -> str:
    return f"{server.rstrip('/')}/web/index.html#!/login.html"


def details_url(server: str, movie_id: str) -> str:
    return f"{server.rstrip('/')}/web/index.html#!/details?id={quote(movie_id, safe='')}"


@dataclass(frozen=True)
class PlaybackOutcome:
    opened: bool
    notice: Notice
    authenticated: bool = False
    url: Optional[str] = None
    mode: Optional[PlaybackMode] = None


BROWSER_REFUSED_MESSAGE = "The browser refused to open the media server. Allow pop-ups or set a default browser."


def _browser_refused(url: str, mode: PlaybackMode, authenticated: bool = False) -> PlaybackOutcome:
    return PlaybackOutcome(
        opened=False,
        authenticated=authenticated,
        url=url,
        mode=mode,
        notice=Notice("error", BROWSER_REFUSED_MESSAGE),
    )


class PlaybackStrategy(Protocol):
    mode: PlaybackMode

    async def run(self, context: BrowsingContext, server: str, movie_id: str | None) -> PlaybackOutcome:
        ...


class InteractiveAuthPlayback:
    """Log in with the anonymous account, fall back to the login page on failure."""

    mode: PlaybackMode = "interactive_auth"

    def __init__(self, authenticator: MediaServerAuthenticator):
        self.authenticator = authenticator

    async def run(self, context: BrowsingContext, server: str, movie_id: str | None) -> PlaybackOutcome:
        log = logger.get_logger()
        try:
            session = await self.authenticator.authenticate(server)
        except MediaServerAuthError as exc:
            log.warning(f"Media server login failed, falling back to manual login: {exc}")
            url = manual_login_url(server)
            if not await context.navigate(url):
                return _browser_refused(url, self.mode)
            return PlaybackOutcome(
                opened=True,
                authenticated=False,
                url=url,
                mode=self.mode,
                notice=Notice("warning", "Opened the media server, but automatic login failed. Please log in manually."),
            )

        url = token_login_url(server, session.access_token, session.user_id, movie_id)
        if not await context.navigate(url):
            return _browser_refused(url, self.mode, authenticated=True)
        log.debug(f"Opened authenticated playback session for user {session.user_id}")
        return PlaybackOutcome(
            opened=True,
            authenticated=True,
            url=url,
            mode=self.mode,
            notice=Notice("success", "Opening the media server, you're logged in automatically"),
        )


class RedirectOnlyPlayback:
    """Send the tab straight to the login or item page."""

    mode: PlaybackMode = "redirect_only"

    async def run(self, context: BrowsingContext, server: str, movie_id: str | None) -> PlaybackOutcome:
        url = details_url(server, movie_id) if movie_id else manual_login_url(server)
        if not await context.navigate(url):
            return _browser_refused(url, self.mode)
        return PlaybackOutcome(
            opened=True,
            authenticated=False,
            url=url,
            mode=self.mode,
            notice=Notice("success", "Opening the media server, log in to start watching"),
        )


def select_playback_strategy(environment: str, authenticator: MediaServerAuthenticator) -> PlaybackStrategy:
    profile = resolve_environment_profile(environment)
    if profile.playback_mode == "interactive_auth":
        return InteractiveAuthPlayback(authenticator)
    return RedirectOnlyPlayback()


class PlaybackSessionLauncher:
    """
    Opens a browser tab and hands it to the strategy for the current environment.

    The tab is opened before the first await so nothing asynchronous can sit
    between the user's action and the window appearing. The environment is
    read on every launch.
    """

    def __init__(
        self,
        authenticator: MediaServerAuthenticator,
        default_server: str,
        environment: Callable[[], str],
        opener: ContextOpener = open_browser_tab,
    ) -> None:
        self.authenticator = authenticator
        self.default_server = default_server.rstrip("/")
        self._environment = environment
        self._opener = opener

    async def launch(self, server: str | None = None, movie_id: str | None = None) -> PlaybackOutcome:
        strategy = select_playback_strategy(self._environment(), self.authenticator)
        context = self._opener()
        if context is None:
            return PlaybackOutcome(
                opened=False,
                mode=strategy.mode,
                notice=Notice("error", "Could not open a browser window. Allow pop-ups or set a default browser."),
            )
        return await strategy.run(context, (server or self.default_server).rstrip("/"), movie_id)
