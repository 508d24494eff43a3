"""AI suggestion helpers: title extraction and watch-link resolution."""

from .session import AssistantSession, AssistantState
from .title_extractor import MATCHERS, MAX_TITLES, ExtractionResult, extract_titles, normalize_title
from .watch_links import WatchLink, WatchLinkResolver, parse_watch_payload

__all__ = [
    "AssistantSession",
    "AssistantState",
    "ExtractionResult",
    "MATCHERS",
    "MAX_TITLES",
    "WatchLink",
    "WatchLinkResolver",
    "extract_titles",
    "normalize_title",
    "parse_watch_payload",
]
