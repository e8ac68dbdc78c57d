"""저장소 모듈."""

from arena_lens.storage.bookmarks import (
    BookmarkStore,
    RecentSearches,
    SavedFilter,
    SavedFilterStore,
)
from arena_lens.storage.files import CachedProjects, ProjectFileCache
from arena_lens.storage.snapshots import SnapshotStore, TrendPeriod
from arena_lens.storage.supabase import SupabaseStorage

__all__ = [
    "BookmarkStore",
    "CachedProjects",
    "ProjectFileCache",
    "RecentSearches",
    "SavedFilter",
    "SavedFilterStore",
    "SnapshotStore",
    "SupabaseStorage",
    "TrendPeriod",
]
