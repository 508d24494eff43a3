from __future__ import annotations

from popcornpal.catalog.types import (
    AIStatus,
    AISuggestion,
    CacheAnalysis,
    CatalogItem,
    CatalogKind,
    CatalogPage,
    FileOption,
    Pagination,
    QualityHealth,
    SearchInfo,
    SizeSource,
    TorrentStats,
)

# Per-kind keys used by the catalog API: (items, total, per page)
_KIND_KEYS: dict[CatalogKind, tuple[str, str, str]] = {
    "movies": ("movies", "totalMovies", "moviesPerPage"),
    "tvshows": ("tvShows", "totalTVShows", "tvShowsPerPage"),
}

_METADATA_SIZE_SOURCES = {"redis_metadata", "metadata"}

PAYLOAD_SHAPE_HINT = "unexpected catalog response shape"


def _shape_error(context: str, value: object) -> ValueError:
    return ValueError(f"{context} is a {type(value).__name__}, not the expected shape ({PAYLOAD_SHAPE_HINT})")


def as_object(value: object, context: str) -> dict:
    """Return ``value`` when it is a JSON object, raise ValueError otherwise."""
    if not isinstance(value, dict):
        raise _shape_error(context, value)
    return value


def field_object(payload: dict, key: str, context: str) -> dict:
    """Nested object under ``key``; absent or null reads as empty."""
    value = payload.get(key)
    return {} if value is None else as_object(value, f"{context}.{key}")


def field_list(payload: dict, key: str, context: str) -> list:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise _shape_error(f"{context}.{key}", value)
    return value


def field_objects(payload: dict, key: str, context: str) -> list[dict]:
    return [as_object(entry, f"{context}.{key}[{idx}]") for idx, entry in enumerate(field_list(payload, key, context))]


def as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if cleaned.isdigit():
            return int(cleaned)
    return None


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "N/A":
        return None
    return text


def _size_source(value: object) -> SizeSource:
    if isinstance(value, str) and value.strip().lower() in _METADATA_SIZE_SOURCES:
        return "metadata"
    return "filename"


def parse_file_option(entry: dict) -> FileOption:
    filename = _as_text(entry.get("filename")) or _as_text(entry.get("originalFilename")) or ""
    return FileOption(
        filename=filename,
        size=_as_text(entry.get("size")) or "Unknown",
        size_source=_size_source(entry.get("sizeSource")),
        original_filename=_as_text(entry.get("originalFilename")),
        href=_as_text(entry.get("href")),
        magnet=_as_text(entry.get("magnet") or entry.get("magnetLink")),
        language=_as_text(entry.get("language")),
        release_year=as_int(entry.get("releaseYear")),
    )


def parse_catalog_item(entry: dict, context: str = "item") -> CatalogItem:
    raw_options = field_object(entry, "downloadOptions", context)
    download_options = {
        str(tier): tuple(
            parse_file_option(file_entry)
            for file_entry in field_objects(raw_options, tier, f"{context}.downloadOptions")
        )
        for tier in raw_options
    }
    item_id = entry.get("id") or entry.get("_id") or entry.get("title") or ""
    return CatalogItem(
        id=str(item_id),
        title=_as_text(entry.get("title")) or "(untitled)",
        year=as_int(entry.get("year")),
        poster=_as_text(entry.get("poster")),
        imdb_rating=_as_text(entry.get("imdbRating")),
        tmdb_rating=_as_text(entry.get("tmdbRating")),
        download_options=download_options,
        genre=_as_text(entry.get("genre")),
        runtime=_as_text(entry.get("runtime")),
        language=_as_text(entry.get("language")),
        director=_as_text(entry.get("director")),
        tagline=_as_text(entry.get("tagline")),
        data_source=_as_text(entry.get("dataSource")),
        metadata=dict(entry),
    )


def parse_pagination(raw: dict, kind: CatalogKind, item_count: int) -> Pagination:
    _, total_key, per_page_key = _KIND_KEYS[kind]
    current = as_int(raw.get("currentPage")) or 1
    total_pages = as_int(raw.get("totalPages")) or 1
    total_items = as_int(raw.get(total_key))
    if total_items is None:
        total_items = as_int(raw.get("totalItems")) or item_count
    per_page = as_int(raw.get(per_page_key)) or as_int(raw.get("itemsPerPage")) or max(item_count, 1)
    has_next = raw.get("hasNextPage")
    has_prev = raw.get("hasPrevPage")
    return Pagination(
        current_page=current,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=per_page,
        has_next_page=bool(has_next) if has_next is not None else current < total_pages,
        has_prev_page=bool(has_prev) if has_prev is not None else current > 1,
    )


def parse_catalog_page(payload: object, kind: CatalogKind) -> CatalogPage:
    """Parse a listing or search response for ``kind``.

    A bare JSON list (the pre-pagination API format) is read as a single page.
    """
    context = f"{kind} response"
    if isinstance(payload, list):
        items = [parse_catalog_item(as_object(entry, f"{context}[{idx}]")) for idx, entry in enumerate(payload)]
        return CatalogPage(
            kind=kind,
            items=items,
            pagination=Pagination(total_items=len(items), items_per_page=max(len(items), 1)),
        )

    root = as_object(payload, context)
    items_key, _, _ = _KIND_KEYS[kind]
    entries = field_objects(root, items_key, context)
    items = [parse_catalog_item(entry, f"{context}.{items_key}[{idx}]") for idx, entry in enumerate(entries)]
    pagination = parse_pagination(field_object(root, "pagination", context), kind, len(items))

    search = None
    raw_search = field_object(root, "search", context)
    if raw_search:
        search = SearchInfo(
            query=str(raw_search.get("query") or ""),
            total_found=as_int(raw_search.get("totalFound")) or 0,
        )
    return CatalogPage(kind=kind, items=items, pagination=pagination, search=search)


def parse_ai_status(payload: object) -> AIStatus:
    root = as_object(payload, "ai status")
    return AIStatus(status=str(root.get("status") or "unknown"), configured=bool(root.get("configured")))


def parse_ai_examples(payload: object) -> list[str]:
    root = as_object(payload, "ai examples")
    if not root.get("success"):
        return []
    return [str(example) for example in field_list(root, "examples", "ai examples") if example]


def parse_ai_suggestion(payload: object) -> AISuggestion:
    root = as_object(payload, "ai suggestions")
    return AISuggestion(
        success=bool(root.get("success")),
        message=str(root.get("message") or ""),
        match_count=as_int(root.get("matchCount")),
    )


def _metric(value: object) -> str:
    return _as_text(value) or "-"


def _counts(raw: dict) -> dict[str, int]:
    return {str(key): as_int(value) or 0 for key, value in raw.items()}


def parse_torrent_stats(payload: object) -> TorrentStats:
    context = "torrent stats"
    root = as_object(payload, context)
    by_quality = field_object(root, "averageHealthByQuality", context)
    health = {}
    for quality, raw in by_quality.items():
        entry = as_object(raw, f"{context}.averageHealthByQuality.{quality}")
        health[str(quality)] = QualityHealth(
            avg_seeders=_metric(entry.get("avgSeeders")),
            avg_leechers=_metric(entry.get("avgLeechers")),
            avg_ratio=_metric(entry.get("avgRatio")),
        )
    distribution = field_object(root, "healthDistribution", context)
    return TorrentStats(
        total_tracked=as_int(root.get("totalTrackedTorrents")) or 0,
        data_source=str(root.get("dataSource") or "unknown"),
        health_by_quality=health,
        health_distribution={str(status): _metric(share) for status, share in distribution.items()},
        cache_hit_rate=_as_text(root.get("cacheHitRate")),
    )


def parse_cache_analysis(payload: object) -> CacheAnalysis:
    """Parse ``/analyze-redis-structure``: an ``analysis`` block plus advice."""
    context = "cache analysis"
    root = as_object(payload, context)
    analysis = field_object(root, "analysis", context)
    block = f"{context}.analysis"
    optimizations = field_object(root, "optimizations", context)
    return CacheAnalysis(
        structure=str(analysis.get("structure") or "unknown"),
        movie_count=as_int(analysis.get("movieCount")) or 0,
        movies_with_downloads=as_int(analysis.get("moviesWithDownloads")) or 0,
        total_size_bytes=as_int(analysis.get("totalSize")) or 0,
        quality_distribution=_counts(field_object(analysis, "qualityDistribution", block)),
        file_formats=_counts(field_object(analysis, "fileFormatSupport", block)),
        detected_fields=tuple(str(name) for name in field_list(analysis, "detectedFields", block)),
        recommendations=tuple(str(text) for text in field_list(root, "recommendations", context) if text),
        optimizations={str(name): bool(enabled) for name, enabled in optimizations.items()},
        analyzed_at=_as_text(root.get("timestamp")),
    )
