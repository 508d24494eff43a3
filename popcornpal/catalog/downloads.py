"""Group a title's files by quality tier for display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from popcornpal.catalog.types import CatalogItem, FileOption, QualityTier

QUALITY_TIERS: tuple[QualityTier, ...] = ("4k", "1080p", "720p", "480p", "others")

# Higher sorts first. Unknown tiers rank below "others".
_TIER_PRIORITY: dict[str, int] = {
    tier: len(QUALITY_TIERS) - index for index, tier in enumerate(QUALITY_TIERS)
}
_UNKNOWN_TIER_PRIORITY = 0


def tier_priority(tier: str) -> int:
    return _TIER_PRIORITY.get(tier, _UNKNOWN_TIER_PRIORITY)


@dataclass(frozen=True)
class DownloadSummary:
    tiers: tuple[tuple[str, tuple[FileOption, ...]], ...]
    total_files: int

    @property
    def tier_labels(self) -> list[str]:
        return [tier for tier, _ in self.tiers]

    def files_for(self, tier: str) -> tuple[FileOption, ...]:
        for label, files in self.tiers:
            if label == tier:
                return files
        return ()


def aggregate_download_options(options: Mapping[str, Sequence[FileOption]] | None) -> DownloadSummary:
    """
    Return non-empty tiers ordered by priority (4k first) and the total file count.

    sorted() is stable, so tiers sharing a priority keep their input order.
    """
    if not options:
        return DownloadSummary(tiers=(), total_files=0)
    populated = [(tier, tuple(files)) for tier, files in options.items() if files]
    ordered = sorted(populated, key=lambda pair: tier_priority(pair[0]), reverse=True)
    total = sum(len(files) for _, files in populated)
    return DownloadSummary(tiers=tuple(ordered), total_files=total)


def visible_items(items: Iterable[CatalogItem]) -> list[CatalogItem]:
    """Drop items without any downloadable file."""
    return [item for item in items if item.total_files > 0]
