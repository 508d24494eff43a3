"""User-facing notices raised by catalog, assistant and playback flows."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Literal

from rich.console import Console
from rich.markup import escape

NoticeLevel = Literal["info", "success", "warning", "error"]

MAX_NOTICE_HISTORY = 50

_PREFIXES: dict[NoticeLevel, str] = {
    "info": "[cyan][INFO][/cyan]",
    "success": "[green][OK][/green]",
    "warning": "[yellow][WARNING][/yellow]",
    "error": "[red][ERROR][/red]",
}


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str

    @property
    def is_error(self) -> bool:
        return self.level == "error"


NoticeSink = Callable[[Notice], None]


@dataclass
class NoticeBoard:
    """Keeps the most recent notices in order and forwards each to an optional sink."""

    sink: NoticeSink | None = None
    notices: deque[Notice] = field(default_factory=lambda: deque(maxlen=MAX_NOTICE_HISTORY))

    def emit(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self.notices.append(notice)
        if self.sink is not None:
            self.sink(notice)
        return notice

    def info(self, message: str) -> Notice:
        return self.emit("info", message)

    def success(self, message: str) -> Notice:
        return self.emit("success", message)

    def warning(self, message: str) -> Notice:
        return self.emit("warning", message)

    def error(self, message: str) -> Notice:
        return self.emit("error", message)

    def latest(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices.clear()


def format_notice(notice: Notice) -> str:
    return f"{_PREFIXES[notice.level]} {escape(notice.message)}"


def console_sink(console: Console) -> NoticeSink:
    def _print(notice: Notice) -> None:
        console.print(format_notice(notice))

    return _print
