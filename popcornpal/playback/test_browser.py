from __future__ import annotations

import webbrowser

import pytest

from popcornpal.playback import browser


class _FakeController:
    def __init__(self, accepts: bool = True) -> None:
        self.accepts = accepts
        self.opened: list[tuple[str, int]] = []

    def open(self, url: str, new: int = 0, autoraise: bool = True) -> bool:
        self.opened.append((url, new))
        return self.accepts


def test_open_browser_tab_opens_blank_tab(monkeypatch) -> None:
    controller = _FakeController()
    monkeypatch.setattr(browser.webbrowser, "get", lambda *_args, **_kwargs: controller)

    tab = browser.open_browser_tab()

    assert isinstance(tab, browser.WebBrowserTab)
    assert controller.opened == [(browser.BLANK_PAGE, 2)]


def test_open_browser_tab_returns_none_without_browser(monkeypatch) -> None:
    def _no_browser(*_args, **_kwargs):
        raise webbrowser.Error("could not locate runnable browser")

    monkeypatch.setattr(browser.webbrowser, "get", _no_browser)

    assert browser.open_browser_tab() is None


def test_open_browser_tab_returns_none_when_refused(monkeypatch) -> None:
    monkeypatch.setattr(browser.webbrowser, "get", lambda *_args, **_kwargs: _FakeController(accepts=False))

    assert browser.open_browser_tab() is None


@pytest.mark.asyncio
async def test_navigate_reuses_tab_and_reports_result() -> None:
    controller = _FakeController()
    tab = browser.WebBrowserTab(controller)

    assert await tab.navigate("http://media.test/web/index.html#!/login.html") is True

    assert controller.opened == [("http://media.test/web/index.html#!/login.html", 0)]
    assert tab.history[-1] == "http://media.test/web/index.html#!/login.html"


@pytest.mark.asyncio
async def test_navigate_returns_false_when_refused() -> None:
    tab = browser.WebBrowserTab(_FakeController(accepts=False))

    assert await tab.navigate("http://media.test/web/index.html#!/details?id=42") is False
