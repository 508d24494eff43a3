#!/usr/bin/env python3
"""
cli.py - Entry point for PopcornPal
Browse and search the catalog, ask the AI for suggestions, and watch them.
"""

try:
    import argparse
    import asyncio
    import sys
    import time
    from dataclasses import dataclass
    from functools import partial
    from pathlib import Path
    from typing import Optional

    from rich.console import Console
    from rich.markup import escape
    from rich.panel import Panel
    from rich.prompt import Prompt
    from rich.table import Table

    import popcornpal as pkg
    from . import logger
    from .assistant.session import AssistantSession
    from .assistant.watch_links import WatchLink
    from .catalog.client import CatalogClient, CatalogError, CatalogResponseError
    from .catalog.listing import CatalogListing
    from .catalog.pagination import PaginationModel
    from .catalog.search_orchestrator import DebouncedSearchOrchestrator
    from .catalog.types import CacheAnalysis, CatalogItem, CatalogKind, FileOption, TorrentStats, format_kind_label
    from .config import PopcornPalConfig, load_config, resolve_environment
    from .file_requests import request_file
    from .notices import NoticeBoard, console_sink
    from .playback.browser import open_external_link
    from .playback.launcher import PlaybackSessionLauncher
    from .playback.media_auth import MediaServerAuthenticator
    from .service_check import check_services
except ImportError as e:
    print(f"Error: Missing required dependency: {e}")
    print("Please install required dependencies: pip install -e .")
    sys.exit(1)

console = Console()
_CLI_SESSION_START_MONOTONIC = time.monotonic()
MAX_EXAMPLES_SHOWN = 6
MAIN_MENU_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Browse the Catalog",
        (
            ("M", "Browse movies"),
            ("T", "Browse TV shows"),
        ),
    ),
    (
        "Search",
        (
            ("S", "Search movies or TV shows"),
        ),
    ),
    (
        "PopcornPal AI",
        (
            ("A", "Ask for movie suggestions"),
        ),
    ),
    (
        "Tools",
        (
            ("V", "Check services"),
            ("H", "Torrent health overview"),
            ("R", "Analyze catalog cache"),
        ),
    ),
    (
        "PopcornPal",
        (
            ("Q", "Quit"),
        ),
    ),
)

def _ui_info(message: str) -> None:
    console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_warn(message: str) -> None:
    console.print(f"[yellow][WARNING][/yellow] {message}")


def _ui_error(message: str) -> None:
    console.print(f"[red][ERROR][/red] {message}")


def _ui_prompt(label: str, default: str | None = None) -> str:
    if default is None:
        return Prompt.ask(label)
    return Prompt.ask(label, default=default)


async def _ui_ask(label: str, default: str | None = None) -> str:
    # Prompt on a worker thread so timers and requests keep running.
    return await asyncio.to_thread(_ui_prompt, label, default)


def _reset_cli_session_timer() -> None:
    global _CLI_SESSION_START_MONOTONIC
    _CLI_SESSION_START_MONOTONIC = time.monotonic()


def _format_elapsed_runtime(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3_600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3_600:.1f}h"


def _ui_goodbye_with_elapsed() -> None:
    elapsed = max(0.0, time.monotonic() - _CLI_SESSION_START_MONOTONIC)
    _ui_info(f"Goodbye! Elapsed {_format_elapsed_runtime(elapsed)}")


@dataclass
class App:
    config: PopcornPalConfig
    client: CatalogClient
    notices: NoticeBoard
    listing: CatalogListing
    assistant: AssistantSession
    launcher: PlaybackSessionLauncher


def build_app(config: PopcornPalConfig) -> App:
    notices = NoticeBoard(sink=console_sink(console))
    client = CatalogClient(config.catalog)
    authenticator = MediaServerAuthenticator(config.media_server)
    return App(
        config=config,
        client=client,
        notices=notices,
        listing=CatalogListing(client, notices=notices, scroll_to_top=console.clear),
        assistant=AssistantSession(client, config.assistant, notices=notices),
        launcher=PlaybackSessionLauncher(
            authenticator,
            default_server=config.media_server.url,
            environment=partial(resolve_environment, config),
        ),
    )


# ---------------------------------------------------------------- rendering

def _rating_text(item: CatalogItem) -> str:
    parts = []
    if item.imdb_rating:
        parts.append(f"IMDb {item.imdb_rating}")
    if item.tmdb_rating:
        parts.append(f"TMDB {item.tmdb_rating}")
    return " / ".join(parts) or "-"


def render_items(title: str, items: list[CatalogItem]) -> Table:
    table = Table(title=title)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Year")
    table.add_column("Rating")
    table.add_column("Files", justify="right")
    table.add_column("Qualities", style="green")
    for idx, item in enumerate(items, start=1):
        summary = item.downloads
        table.add_row(
            str(idx),
            escape(item.title),
            str(item.year or "-"),
            _rating_text(item),
            str(summary.total_files),
            ", ".join(summary.tier_labels),
        )
    return table


def format_page_footer(model: PaginationModel, kind_label: str) -> str:
    first, last = model.showing_range()
    window = " ".join(f"[{page}]" if page == model.page else str(page) for page in model.page_window())
    return f"Showing {first} - {last} of {model.total_items} {kind_label}   Pages: {window}"


def render_download_options(item: CatalogItem) -> tuple[Table, list[FileOption]]:
    summary = item.downloads
    label = "file" if summary.total_files == 1 else "files"
    table = Table(title=f"{escape(item.title)} ({item.year or '-'}) - {summary.total_files} {label} available")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Quality", style="green")
    table.add_column("Filename")
    table.add_column("Size")
    table.add_column("Language")
    table.add_column("Year")
    numbered: list[FileOption] = []
    for tier, files in summary.tiers:
        for file in files:
            numbered.append(file)
            size = f"{file.size} ✓" if file.size_verified else file.size
            table.add_row(
                str(len(numbered)),
                tier,
                escape(file.filename),
                size,
                file.language or "-",
                str(file.release_year or "-"),
            )
    return table, numbered


def render_item_details(item: CatalogItem) -> Panel | None:
    """Tagline, genre, runtime and credits shown above the file list."""
    lines = []
    if item.tagline:
        lines.append(f"[italic]\"{escape(item.tagline)}\"[/italic]")
    facts = [
        f"{label}: {escape(value)}"
        for label, value in (("Genre", item.genre), ("Runtime", item.runtime), ("Language", item.language))
        if value
    ]
    if facts:
        lines.append("   ".join(facts))
    if item.director:
        lines.append(f"Director: {escape(item.director)}")
    ratings = _rating_text(item)
    if ratings != "-":
        lines.append(f"Ratings: {ratings}")
    if item.poster:
        lines.append(f"[dim]Poster: {escape(item.poster)}[/dim]")
    if item.data_source:
        lines.append(f"[dim]Metadata source: {escape(item.data_source)}[/dim]")
    if not lines:
        return None
    return Panel("\n".join(lines), title=f"{escape(item.title)} ({item.year or '-'})")


def render_torrent_stats(stats: TorrentStats) -> list[Table]:
    quality = Table(title=f"Torrent Health Overview - {stats.total_tracked} tracked ({stats.source_label} data)")
    quality.add_column("Quality", style="green")
    quality.add_column("Avg seeders", justify="right")
    quality.add_column("Avg leechers", justify="right")
    quality.add_column("Avg ratio", justify="right")
    for tier, health in stats.health_by_quality.items():
        quality.add_row(tier.upper(), health.avg_seeders, health.avg_leechers, health.avg_ratio)

    distribution = Table(title="Health Distribution")
    distribution.add_column("Status", style="cyan")
    distribution.add_column("Share", justify="right")
    for status, share in stats.health_distribution.items():
        distribution.add_row(escape(status), share)
    if stats.cache_hit_rate:
        distribution.caption = f"Cache hit rate: {stats.cache_hit_rate}"
    return [quality, distribution]


def render_cache_analysis(analysis: CacheAnalysis) -> list[Table]:
    overview = Table(title="Catalog Cache Analysis", show_header=False)
    overview.add_column("Field", style="cyan")
    overview.add_column("Value")
    overview.add_row("Structure", escape(analysis.structure))
    overview.add_row("Total movies", str(analysis.movie_count))
    overview.add_row("With downloads", str(analysis.movies_with_downloads))
    overview.add_row("Cache size", f"{analysis.total_size_mb:.2f} MB")
    overview.add_row("Detected fields", escape(", ".join(analysis.detected_fields)) or "-")
    for tier, count in analysis.quality_distribution.items():
        overview.add_row(f"Quality {escape(tier)}", f"{count} movies")
    for extension, count in list(analysis.file_formats.items())[:5]:
        overview.add_row(f"Format .{escape(extension)}", f"{count} files")
    if analysis.analyzed_at:
        overview.caption = f"Last analyzed: {analysis.analyzed_at}"

    advice = Table(title="Recommendations and Optimizations", show_header=False)
    advice.add_column("Item")
    if analysis.has_enhanced_metadata:
        advice.add_row("[green]Enhanced metadata detected: language/year filtering available[/green]")
    for text in analysis.recommendations:
        advice.add_row(escape(text))
    for feature, enabled in analysis.optimizations.items():
        mark = "[green]✓[/green]" if enabled else "[red]✗[/red]"
        advice.add_row(f"{mark} {escape(feature)}")
    return [overview, advice]


def render_watch_links(links: dict[str, WatchLink]) -> Table:
    table = Table(title="Watch Now")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Suggested", style="bold")
    table.add_column("On the media server")
    table.add_column("Year")
    table.add_column("Rating")
    for idx, link in enumerate(links.values(), start=1):
        table.add_row(str(idx), escape(link.title), escape(link.name), str(link.year or "-"), link.rating or "-")
    return table


def resolve_page_choice(choice: str, model: PaginationModel) -> int | None:
    """Map a navigation command (n/p/f/l or a page number) to a page."""
    choice = choice.strip().lower()
    if choice == "n":
        return model.page + 1
    if choice == "p":
        return model.page - 1
    if choice == "f":
        return 1
    if choice == "l":
        return model.last_page
    if choice.isdigit():
        return int(choice)
    return None


def parse_indexed_command(choice: str, prefix: str) -> int | None:
    """Return N for commands like 'd3'; None otherwise."""
    choice = choice.strip().lower()
    if not choice.startswith(prefix):
        return None
    rest = choice[len(prefix):].strip()
    return int(rest) if rest.isdigit() else None


# ---------------------------------------------------------------- flows

FILE_ACTIONS = ("o", "m", "r")


def parse_file_action(choice: str) -> tuple[str, int] | None:
    """Split 'm2' into ('m', 2) for the open/magnet/request file actions."""
    for action in FILE_ACTIONS:
        idx = parse_indexed_command(choice, action)
        if idx is not None:
            return action, idx
    return None


async def open_file_link(notices: NoticeBoard, file: FileOption, action: str) -> bool:
    """Open the direct download ('o') or magnet ('m') link of a file."""
    if action == "m":
        link, label, missing = file.magnet, "magnet link", "No magnet link available for this file"
    else:
        link, label, missing = file.href, "download", "No direct download link available for this file"
    if not link:
        notices.error(missing)
        return False
    if not await asyncio.to_thread(open_external_link, link):
        notices.error(f"Failed to open {label}")
        return False
    notices.success(f"Opening {label} for \"{file.filename}\"")
    return True


async def _show_item_downloads(app: App, item: CatalogItem) -> None:
    if item.total_files == 0:
        _ui_error("No download options available for this item")
        return
    details = render_item_details(item)
    if details is not None:
        console.print(details)
    while True:
        table, files = render_download_options(item)
        console.print(table)
        choice = await _ui_ask("o# download, m# magnet, r# request file, b back", default="b")
        if choice.strip().lower() in {"b", ""}:
            return
        parsed = parse_file_action(choice)
        if parsed is None or not 1 <= parsed[1] <= len(files):
            _ui_warn("Unknown choice. Please select a listed option.")
            continue
        action, idx = parsed
        file = files[idx - 1]
        if action == "r":
            notice = await request_file(app.config.requests, item, file)
            app.notices.emit(notice.level, notice.message)
        else:
            await open_file_link(app.notices, file, action)


async def _pick_item(app: App, items: list[CatalogItem], choice: str) -> bool:
    idx = parse_indexed_command(choice, "d")
    if idx is None:
        return False
    if not 1 <= idx <= len(items):
        _ui_warn(f"No item #{idx} on this page.")
        return True
    await _show_item_downloads(app, items[idx - 1])
    return True


async def browse_catalog(app: App, kind: CatalogKind) -> None:
    listing = app.listing
    await listing.switch_kind(kind)
    label = format_kind_label(kind)
    while True:
        state = listing.state
        if state.items:
            console.print(render_items(f"{label} Collection", state.items))
            console.print(format_page_footer(listing.model, label.lower()))
        elif not state.error:
            _ui_info(f"No {label.lower()} found.")
        choice = await _ui_ask("n/p/f/l or page number, d# details, b back", default="b")
        if choice.strip().lower() in {"b", ""}:
            return
        if await _pick_item(app, state.items, choice):
            continue
        page = resolve_page_choice(choice, listing.model)
        if page is None or not await listing.change_page(page):
            _ui_warn("That page is not available.")


async def search_catalog(app: App) -> None:
    kind_choice = (await _ui_ask("Search [M]ovies or [T]V shows", default="M")).strip().upper()
    kind: CatalogKind = "tvshows" if kind_choice.startswith("T") else "movies"
    orchestrator = DebouncedSearchOrchestrator(
        partial(app.client.search, kind),
        kind=kind,
        debounce_seconds=app.config.search.debounce_seconds,
        notices=app.notices,
    )
    label = format_kind_label(kind).lower()
    _ui_info(f"Search {label} by title, language, genre... (blank to exit; :n/:p pages, :d# details)")
    while True:
        text = await _ui_ask("Search", default="")
        command = text.strip().lower()
        if command.startswith(":"):
            state = orchestrator.state
            if await _pick_item(app, state.results, command[1:]):
                continue
            page = resolve_page_choice(command[1:], PaginationModel.from_snapshot(state.pagination))
            if page is None or orchestrator.change_page(page) is None:
                _ui_warn("That page is not available.")
                continue
        else:
            orchestrator.on_input(text)
            if not text.strip():
                return
        await orchestrator.wait_idle()
        state = orchestrator.state
        if state.error:
            continue
        if state.search_info:
            _ui_info(f"Found {state.search_info.total_found} results for \"{escape(state.search_info.query)}\"")
        if state.results:
            console.print(render_items(f"Search: {escape(state.query)}", state.results))
            model = PaginationModel.from_snapshot(state.pagination)
            if model.total_pages > 1:
                console.print(f"Page {model.page} of {model.total_pages}")
        else:
            _ui_info(f"No {label} found matching \"{escape(state.query)}\"")


async def _launch_watch_link(app: App, link: WatchLink) -> None:
    try:
        outcome = await app.launcher.launch(server=link.server, movie_id=link.movie_id)
    except ValueError as exc:
        _ui_error(str(exc))
        return
    app.notices.emit(outcome.notice.level, outcome.notice.message)


async def show_torrent_health(app: App) -> bool:
    try:
        stats = await app.client.torrent_stats()
    except CatalogResponseError as exc:
        app.notices.error(exc.message or "Failed to fetch torrent stats")
        return False
    except (CatalogError, ValueError) as exc:
        logger.get_logger().debug(f"Failed to fetch torrent stats: {exc}")
        app.notices.error("Failed to fetch torrent stats")
        return False
    for table in render_torrent_stats(stats):
        console.print(table)
    console.print("[dim]Pre-download health data, analyzed before torrents are queued[/dim]")
    return True


async def show_cache_analysis(app: App) -> bool:
    console.print("[dim]Analyzing catalog cache structure...[/dim]")
    try:
        analysis = await app.client.analyze_cache()
    except CatalogResponseError as exc:
        app.notices.error(exc.message or "Failed to analyze catalog cache")
        return False
    except (CatalogError, ValueError) as exc:
        logger.get_logger().debug(f"Cache analysis failed: {exc}")
        app.notices.error("Failed to analyze catalog cache")
        return False
    for table in render_cache_analysis(analysis):
        console.print(table)
    return True


async def ask_assistant(app: App) -> None:
    assistant = app.assistant
    status = await assistant.load_status()
    if not status.configured:
        console.print(Panel(
            "[bold]PopcornPal AI is Currently Unavailable[/bold]\n"
            "AI movie suggestions require additional configuration.\n"
            f"Status: {escape(status.status)}"
        ))
        return
    examples = await assistant.load_examples()
    if examples:
        console.print("Try asking me:")
        for idx, example in enumerate(examples[:MAX_EXAMPLES_SHOWN], start=1):
            console.print(f"    [{idx}] {escape(example)}")

    while True:
        question = await _ui_ask("Ask me about movies (blank to go back)", default="")
        if question.strip().isdigit() and 1 <= int(question) <= min(len(examples), MAX_EXAMPLES_SHOWN):
            question = examples[int(question) - 1]
        if not question.strip():
            assistant.clear()
            return
        console.print("[dim]AI is thinking about your movie request...[/dim]")
        state = await assistant.ask(question)
        if state.suggestion is None:
            continue
        if state.suggestion.success:
            heading = "Movie Suggestions"
            if state.suggestion.match_count:
                heading += f" (found {state.suggestion.match_count} relevant movies)"
            console.print(Panel(escape(state.suggestion.message), title=heading))
        else:
            _ui_info("Try rephrasing your question or being more specific.")
            continue

        if not state.watch_links:
            continue
        links = list(state.watch_links.values())
        console.print(render_watch_links(state.watch_links))
        choice = await _ui_ask("Watch # (Enter to skip)", default="")
        if choice.strip().isdigit() and 1 <= int(choice) <= len(links):
            await _launch_watch_link(app, links[int(choice) - 1])


# ---------------------------------------------------------------- menu

def _render_main_menu(config: PopcornPalConfig) -> None:
    console.clear()
    console.print(Panel("[bold blue]POPCORNPAL[/bold blue]\nYour movie catalog and AI watch companion"))
    console.print()
    console.print(f"Catalog: {escape(config.catalog.base_url)}   Media server: {escape(config.media_server.url)}")
    console.print(f"Environment: {escape(resolve_environment(config))}")
    console.print()
    for section_idx, (section_title, items) in enumerate(MAIN_MENU_SECTIONS):
        console.print(section_title)
        for key, label in items:
            console.print(f"    [{key}] {label}")
        if section_idx < len(MAIN_MENU_SECTIONS) - 1:
            console.print()
    console.print()


async def _handle_main_menu_choice(app: App, choice: str) -> bool:
    if choice == "Q":
        _ui_goodbye_with_elapsed()
        return False

    handlers = {
        "M": lambda: browse_catalog(app, "movies"),
        "T": lambda: browse_catalog(app, "tvshows"),
        "S": lambda: search_catalog(app),
        "A": lambda: ask_assistant(app),
        "V": lambda: check_services(app.config, app.client),
        "H": lambda: show_torrent_health(app),
        "R": lambda: show_cache_analysis(app),
    }
    handler = handlers.get(choice)
    if handler is None:
        _ui_warn("Unknown choice. Please select a listed option.")
        await _ui_ask("Press Enter to continue", default="")
        return True
    await handler()
    if choice == "V":
        _ui_info("Service check complete.")
    if choice in {"V", "H", "R"}:
        await _ui_ask("Press Enter to continue", default="")
    return True


async def main_menu(config: PopcornPalConfig) -> None:
    """Main menu for PopcornPal"""
    app = build_app(config)
    try:
        while True:
            _render_main_menu(config)
            choice = (await _ui_ask("Choice", default="M")).strip().upper()
            if not await _handle_main_menu_choice(app, choice):
                return
    finally:
        await app.client.close()


async def run_check(config: PopcornPalConfig) -> bool:
    client = CatalogClient(config.catalog)
    try:
        return await check_services(config, client)
    finally:
        await client.close()


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"POPCORNPAL v{getattr(pkg, '__version__', '0.0.0')} - Media catalog browser with AI watch suggestions")
    print()
    parser.print_help()


def resolve_config_path(args_config: Optional[str]) -> Path:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        return p
    return Path.cwd() / "config.toml"


def main():
    """Entry point"""
    _reset_cli_session_timer()
    parser = argparse.ArgumentParser(add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("--check",), {"action": "store_true", "help": "Check services and exit"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("-l", "--log-file"), {"metavar": "PATH", "help": "Also write log output to this file"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with API calls, JSON responses, timestamps"}),
    ):
        parser.add_argument(*args, **kwargs)

    try:
        args = parser.parse_args()
        if args.help:
            show_help(parser)
            sys.exit(0)

        config = load_config(resolve_config_path(args.config))
        log_file = Path(args.log_file).expanduser() if args.log_file else None
        logger.set_logger(logger.PopcornPalLogger(log_file=log_file, debug=args.debug))

        if args.check:
            result = asyncio.run(run_check(config))
            sys.exit(0 if result else 1)
        asyncio.run(main_menu(config))
        sys.exit(0)
    except KeyboardInterrupt:
        _ui_goodbye_with_elapsed()
        sys.exit(0)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        logger.get_logger().close()


if __name__ == "__main__":
    main()
