"""Catalog browsing, search and download-option helpers."""

from .client import CatalogClient, CatalogConnectionError, CatalogError, CatalogResponseError
from .downloads import DownloadSummary, QUALITY_TIERS, aggregate_download_options, visible_items
from .listing import CatalogListing, ListingState
from .pagination import MAX_VISIBLE_PAGES, PaginationModel, change_page
from .search_orchestrator import DebouncedSearchOrchestrator, SearchState
from .types import CatalogItem, CatalogKind, CatalogPage, FileOption, Pagination, SearchInfo

__all__ = [
    "CatalogClient",
    "CatalogConnectionError",
    "CatalogError",
    "CatalogResponseError",
    "CatalogItem",
    "CatalogKind",
    "CatalogListing",
    "CatalogPage",
    "DebouncedSearchOrchestrator",
    "DownloadSummary",
    "FileOption",
    "ListingState",
    "MAX_VISIBLE_PAGES",
    "Pagination",
    "PaginationModel",
    "QUALITY_TIERS",
    "SearchInfo",
    "SearchState",
    "aggregate_download_options",
    "change_page",
    "visible_items",
]
