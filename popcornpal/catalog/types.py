"""Shared data structures for catalog listings and search."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from popcornpal.catalog.downloads import DownloadSummary

CatalogKind = Literal["movies", "tvshows"]
ALL_CATALOG_KINDS: tuple[CatalogKind, ...] = ("movies", "tvshows")
CATALOG_KIND_LABELS: dict[CatalogKind, str] = {
    "movies": "Movies",
    "tvshows": "TV Shows",
}

QualityTier = Literal["4k", "1080p", "720p", "480p", "others"]
SizeSource = Literal["metadata", "filename"]


def format_kind_label(kind: CatalogKind) -> str:
    return CATALOG_KIND_LABELS.get(kind, kind.title())


@dataclass(frozen=True)
class FileOption:
    """One downloadable file of a catalog item."""

    filename: str
    size: str
    size_source: SizeSource = "filename"
    original_filename: Optional[str] = None
    href: Optional[str] = None
    magnet: Optional[str] = None
    language: Optional[str] = None
    release_year: Optional[int] = None

    @property
    def size_verified(self) -> bool:
        return self.size_source == "metadata"


@dataclass(frozen=True)
class CatalogItem:
    """A movie or TV show with its files grouped by quality tier."""

    id: str
    title: str
    year: Optional[int] = None
    poster: Optional[str] = None
    imdb_rating: Optional[str] = None
    tmdb_rating: Optional[str] = None
    download_options: Mapping[str, Tuple[FileOption, ...]] = field(default_factory=dict)
    genre: Optional[str] = None
    runtime: Optional[str] = None
    language: Optional[str] = None
    director: Optional[str] = None
    tagline: Optional[str] = None
    data_source: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @cached_property
    def downloads(self) -> "DownloadSummary":
        from popcornpal.catalog.downloads import aggregate_download_options

        return aggregate_download_options(self.download_options)

    @property
    def total_files(self) -> int:
        return self.downloads.total_files


@dataclass(frozen=True)
class Pagination:
    """Pagination snapshot as reported by the catalog API."""

    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    items_per_page: int = 20
    has_next_page: bool = False
    has_prev_page: bool = False


@dataclass(frozen=True)
class SearchInfo:
    query: str
    total_found: int


@dataclass(frozen=True)
class CatalogPage:
    """One page of catalog results."""

    kind: CatalogKind
    items: List[CatalogItem]
    pagination: Pagination
    search: Optional[SearchInfo] = None


@dataclass(frozen=True)
class AIStatus:
    status: str
    configured: bool


@dataclass(frozen=True)
class AISuggestion:
    success: bool
    message: str
    match_count: Optional[int] = None


@dataclass(frozen=True)
class QualityHealth:
    avg_seeders: str
    avg_leechers: str
    avg_ratio: str


@dataclass(frozen=True)
class TorrentStats:
    """Seeding health of the torrents the backend tracks, per quality."""

    total_tracked: int
    data_source: str
    health_by_quality: Mapping[str, QualityHealth] = field(default_factory=dict)
    health_distribution: Mapping[str, str] = field(default_factory=dict)
    cache_hit_rate: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.data_source == "real"

    @property
    def source_label(self) -> str:
        return "live" if self.is_live else "enhanced"


@dataclass(frozen=True)
class CacheAnalysis:
    structure: str
    movie_count: int
    movies_with_downloads: int
    total_size_bytes: int
    quality_distribution: Mapping[str, int] = field(default_factory=dict)
    file_formats: Mapping[str, int] = field(default_factory=dict)
    detected_fields: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    optimizations: Mapping[str, bool] = field(default_factory=dict)
    analyzed_at: Optional[str] = None

    @property
    def total_size_mb(self) -> float:
        return self.total_size_bytes / 1024 / 1024

    @property
    def has_enhanced_metadata(self) -> bool:
        # Language and year fields allow better TMDB matching and filtering.
        return "language" in self.detected_fields or "year" in self.detected_fields
