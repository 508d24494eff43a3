"""In-memory state for one AI suggestion conversation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from popcornpal import logger
from popcornpal.assistant.title_extractor import ExtractionResult, extract_titles
from popcornpal.assistant.watch_links import WatchLink, WatchLinkResolver
from popcornpal.catalog.client import CatalogClient, CatalogError, CatalogResponseError
from popcornpal.catalog.types import AIStatus, AISuggestion
from popcornpal.config import AssistantConfig
from popcornpal.notices import NoticeBoard


@dataclass
class AssistantState:
    query: str = ""
    suggestion: AISuggestion | None = None
    extraction: ExtractionResult = field(default_factory=ExtractionResult)
    watch_links: dict[str, WatchLink] = field(default_factory=dict)
    loading: bool = False
    asked_at: datetime | None = None

    def is_empty(self) -> bool:
        return self.suggestion is None

    def has_watch_links(self) -> bool:
        return bool(self.watch_links)


class AssistantSession:
    def __init__(
        self,
        client: CatalogClient,
        config: AssistantConfig | None = None,
        *,
        resolver: WatchLinkResolver | None = None,
        notices: NoticeBoard | None = None,
    ) -> None:
        self.client = client
        self.config = config or AssistantConfig()
        self.resolver = resolver or WatchLinkResolver(client.ai_watch)
        self.notices = notices or NoticeBoard()
        self.state = AssistantState()
        self.status: AIStatus | None = None
        self.examples: list[str] = []
        self._sequence = 0

    async def load_status(self) -> AIStatus:
        try:
            self.status = await self.client.ai_status()
        except (CatalogError, ValueError) as exc:
            logger.get_logger().debug(f"Failed to check AI status: {exc}")
            self.status = AIStatus(status="error", configured=False)
        return self.status

    async def load_examples(self) -> list[str]:
        try:
            self.examples = await self.client.ai_examples()
        except (CatalogError, ValueError) as exc:
            logger.get_logger().debug(f"Failed to fetch examples: {exc}")
            self.examples = []
        return self.examples

    def clear(self) -> None:
        self._sequence += 1
        self.state = AssistantState()

    async def ask(self, query: str) -> AssistantState:
        """Ask for suggestions, then extract and resolve watchable titles."""
        query = query.strip()
        if not query:
            self.notices.error("Please enter a movie question or description")
            return self.state

        self._sequence += 1
        sequence = self._sequence
        # Never mix links from a previous answer into this one.
        self.state = AssistantState(query=query, loading=True, asked_at=datetime.now())
        state = self.state
        log = logger.get_logger()

        try:
            suggestion = await self.client.ai_suggestions(
                query,
                match_count=self.config.match_count,
                include_sources=self.config.include_sources,
            )
        except CatalogResponseError as exc:
            suggestion = AISuggestion(success=False, message=exc.message or "Failed to get AI suggestions")
        except (CatalogError, ValueError) as exc:
            log.warning(f"AI suggestion error: {exc}")
            suggestion = AISuggestion(success=False, message="Failed to get AI suggestions")

        if sequence != self._sequence:
            log.debug(f"Dropping superseded AI answer for '{query}'")
            return self.state

        state.suggestion = suggestion
        if not suggestion.success:
            state.loading = False
            self.notices.error(suggestion.message or "Failed to get suggestions")
            return state

        self.notices.success("Got your movie suggestions!")
        state.extraction = extract_titles(suggestion.message)
        if not state.extraction:
            state.loading = False
            log.debug("No candidate titles found in AI answer")
            return state

        log.debug(
            f"Extracted {len(state.extraction.titles)} titles via {state.extraction.strategy}: "
            f"{', '.join(state.extraction.titles)}"
        )
        links = await self.resolver.resolve(state.extraction.titles)
        if sequence != self._sequence:
            log.debug(f"Dropping superseded watch links for '{query}'")
            return self.state

        state.watch_links = links
        state.loading = False
        if not links:
            self.notices.info("None of the suggested titles are available to watch right now")
        return state
