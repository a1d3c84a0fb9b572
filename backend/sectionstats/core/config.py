"""
Application configuration.
All values can be overridden from environment variables or a .env file.
"""
from typing import Dict, List

from pydantic_settings import BaseSettings


# Trailing window length in days per selectable time range (0 = unbounded)
RANGE_DAYS: Dict[str, int] = {
    "1m": 30,
    "3m": 90,
    "6m": 180,
    "1y": 365,
    "all": 0,
}

# Granularity a chart starts with when the time range changes
DEFAULT_BUCKET_TYPE: Dict[str, str] = {
    "1m": "weekly",
    "3m": "monthly",
    "6m": "monthly",
    "1y": "quarterly",
    "all": "yearly",
}


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console
    
    # Pipeline timing - logs per-stage durations at debug level
    PIPELINE_TIMING_LOG: bool = False
    
    # Sections with at least this many traversals are charted from buckets
    BUCKET_THRESHOLD: int = 100
    
    # Douglas-Peucker tolerance in degrees (~5m at the equator)
    SIMPLIFY_TOLERANCE: float = 0.00005
    
    # Simplified trace cache capacity (entries per section)
    TRACE_CACHE_SIZE: int = 256
    
    # Deltas smaller than this (seconds or seconds/km) are not displayed
    DELTA_SIGNIFICANCE_SECONDS: float = 1.0
    
    # Vertical padding applied around chart speed bounds
    CHART_PADDING_RATIO: float = 0.15
    
    # Sport types whose deltas are shown as pace (seconds per km)
    RUNNING_SPORT_TYPES: List[str] = ["Run", "VirtualRun", "Walk", "Hike"]
    
    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    
    def range_days(self, time_range: str) -> int:
        """Get the trailing window length for a time range key."""
        try:
            return RANGE_DAYS[time_range]
        except KeyError:
            raise ValueError(f"Unknown time range: {time_range}")
    
    def is_running_sport(self, sport_type: str) -> bool:
        """Check if a sport type uses pace deltas."""
        return sport_type in self.RUNNING_SPORT_TYPES
    
    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
