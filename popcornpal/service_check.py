"""
service_check.py - Reachability check for the catalog, AI and media server
"""

import asyncio

import aiohttp
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .catalog.client import CatalogClient, CatalogError
from .config import PopcornPalConfig
from .playback.media_auth import build_media_auth_header

console = Console()


def _unreachable_msg(detail: str) -> str:
    return f"Unreachable - {detail}"


async def check_catalog(client: CatalogClient):
    """Fetch a one-item page from the movie catalog"""
    page = await client.list_titles("movies", page=1, limit=1)
    total = page.pagination.total_items
    return "Catalog API", True, f"{total} movies available"


async def check_ai(client: CatalogClient):
    """Ask the backend whether the AI assistant is configured"""
    status = await client.ai_status()
    if status.configured:
        return "PopcornPal AI", True, f"Ready (status: {status.status})"
    return "PopcornPal AI", False, f"Not configured (status: {status.status})"


async def check_torrent_stats(client: CatalogClient):
    """Summarize tracked torrent health"""
    stats = await client.torrent_stats()
    details = f"Tracked: {stats.total_tracked} torrents ({stats.source_label} data)"
    if stats.cache_hit_rate:
        details += f", cache hit rate {stats.cache_hit_rate}"
    return "Torrent Stats", True, details


async def check_media_server(session: aiohttp.ClientSession, config: PopcornPalConfig, timeout=10):
    """Read the media server's public system info"""
    server = config.media_server
    headers = {
        "X-Emby-Authorization": build_media_auth_header(server.client_name, server.device_name, server.device_id),
    }
    url = f"{server.url.rstrip('/')}/System/Info/Public"
    async with session.get(url, headers=headers, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
        if response.status != 200:
            return "Media Server", False, _unreachable_msg(f"{response.status} {response.reason}")
        data = await response.json(content_type=None)
        name = data.get("ServerName", "media server") if isinstance(data, dict) else "media server"
        version = data.get("Version", "?") if isinstance(data, dict) else "?"
        return "Media Server", True, f"{name} (version {version})"


async def run_check(check_func, service_name, *args):
    """Turn any failure of a single check into a failed row"""
    try:
        return await check_func(*args)
    except CatalogError as e:
        return service_name, False, _unreachable_msg(str(e))
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        return service_name, False, _unreachable_msg(type(e).__name__)
    except Exception as e:
        # Catch-all to prevent crashes and surface a helpful message
        return service_name, False, f"Unexpected error: {type(e).__name__}: {e}"


async def check_services(config: PopcornPalConfig, client: CatalogClient) -> bool:
    """Check every configured service concurrently"""
    console.print("[cyan][INFO][/cyan] Checking services...")

    session_timeout = aiohttp.ClientTimeout(total=40)
    async with aiohttp.ClientSession(timeout=session_timeout) as session:
        results = await asyncio.gather(
            run_check(check_catalog, "Catalog API", client),
            run_check(check_ai, "PopcornPal AI", client),
            run_check(check_torrent_stats, "Torrent Stats", client),
            run_check(check_media_server, "Media Server", session, config),
        )

    table = Table(title="Service Check Results")
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Status", style="bold", no_wrap=True)
    table.add_column("Details", style="yellow")

    for service, status, details in results:
        status_str = "[green]✓ OK[/green]" if status else "[red]✗ Failed[/red]"
        if details:
            details = escape(str(details).strip()[:100])
        table.add_row(service, status_str, details or "")

    console.print(table)
    return all(status for _, status, _ in results)
