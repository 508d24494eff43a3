"""Browser tabs used as playback contexts."""

from __future__ import annotations

import asyncio
import webbrowser
from typing import Callable, Optional, Protocol

from popcornpal import logger

BLANK_PAGE = "about:blank"


class BrowsingContext(Protocol):
    """A browser tab that can be pointed at a URL."""

    async def navigate(self, url: str) -> bool:
        ...


ContextOpener = Callable[[], Optional[BrowsingContext]]


class WebBrowserTab:
    """
    A tab already opened on the system browser.

    Redirects reuse the window where the browser supports it. They run on a
    worker thread because console browsers block until they exit.
    """

    def __init__(self, controller: webbrowser.BaseBrowser):
        self._controller = controller
        self.history: list[str] = [BLANK_PAGE]

    async def navigate(self, url: str) -> bool:
        self.history.append(url)
        try:
            accepted = await asyncio.to_thread(self._controller.open, url, 0)
        except webbrowser.Error as exc:
            logger.get_logger().warning(f"Browser failed to open {url}: {exc}")
            return False
        if not accepted:
            logger.get_logger().warning(f"Browser refused to open {url}")
        return bool(accepted)


def open_browser_tab() -> WebBrowserTab | None:
    """Open a blank tab on the default browser; None when it cannot be opened."""
    log = logger.get_logger()
    try:
        controller = webbrowser.get()
        opened = controller.open(BLANK_PAGE, new=2)
    except webbrowser.Error as exc:
        log.debug(f"No usable web browser: {exc}")
        return None
    if not opened:
        log.debug("Browser refused to open a new tab")
        return None
    return WebBrowserTab(controller)


def open_external_link(url: str) -> bool:
    """Open a download or magnet link in the default handler."""
    try:
        return webbrowser.open(url, new=2)
    except webbrowser.Error as exc:
        logger.get_logger().warning(f"Could not open {url}: {exc}")
        return False
