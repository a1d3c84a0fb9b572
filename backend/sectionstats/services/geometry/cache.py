"""
Trace Cache - Simplified activity traces for the section currently shown.

Simplification is deterministic, so a trace only needs simplifying once
per (activity, tolerance). Entries belong to a single section: switching
sections empties the cache.
"""
from collections import OrderedDict
from threading import Lock
from typing import List, Optional, Sequence, Tuple

from sectionstats.core.config import settings
from sectionstats.core.logging import get_logger
from sectionstats.services.geometry.simplify import Point, simplify_polyline

logger = get_logger(__name__)

CacheKey = Tuple[str, float]


class TraceCache:
    """
    Bounded LRU cache of simplified traces.

    Thread-safe; several charts can read it at once.
    """

    def __init__(self, max_entries: Optional[int] = None):
        """
        Initialize the cache.

        Args:
            max_entries: Capacity, settings.TRACE_CACHE_SIZE if None
        """
        if max_entries is None:
            max_entries = settings.TRACE_CACHE_SIZE
        if max_entries < 1:
            raise ValueError(f"Cache size must be at least 1: {max_entries}")

        self._entries: "OrderedDict[CacheKey, List[Point]]" = OrderedDict()
        self._lock = Lock()
        self._max_entries = max_entries
        self._section_id: Optional[str] = None
        self.hits = 0
        self.misses = 0

    @property
    def section_id(self) -> Optional[str]:
        return self._section_id

    def get_or_simplify(
        self,
        section_id: str,
        activity_id: str,
        points: Sequence[Point],
        tolerance: Optional[float] = None
    ) -> List[Point]:
        """
        Get a cached simplified trace, simplifying on a miss.

        Args:
            section_id: Section being displayed
            activity_id: Activity the trace belongs to
            points: Full-resolution trace
            tolerance: Douglas-Peucker tolerance, settings default if None

        Returns:
            Simplified trace (a copy; callers may mutate it)
        """
        if tolerance is None:
            tolerance = settings.SIMPLIFY_TOLERANCE
        key = (activity_id, tolerance)

        with self._lock:
            self._bind_section(section_id)
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return list(cached)
            self.misses += 1

        simplified = simplify_polyline(points, tolerance)

        with self._lock:
            # Section may have changed while simplifying
            if self._section_id == section_id:
                self._entries[key] = simplified
                self._entries.move_to_end(key)
                while len(self._entries) > self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted simplified trace", activity_id=evicted[0])

        return list(simplified)

    def clear(self) -> None:
        """Drop all entries and forget the bound section."""
        with self._lock:
            self._entries.clear()
            self._section_id = None

    def _bind_section(self, section_id: str) -> None:
        """Empty the cache when the displayed section changes. Lock held."""
        if self._section_id == section_id:
            return
        if self._entries:
            logger.debug(
                "Section changed, clearing trace cache",
                previous_section_id=self._section_id,
                section_id=section_id,
                evicted=len(self._entries)
            )
        self._entries.clear()
        self._section_id = section_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, activity_id: str) -> bool:
        with self._lock:
            return any(key[0] == activity_id for key in self._entries)
