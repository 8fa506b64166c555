"""
Analytics Configuration

Tunables for the reporting layer: query timeouts, trailing windows,
leaderboard sizes and matchmaking weights.
"""

from dataclasses import dataclass
from pydantic_settings import BaseSettings


class AnalyticsSettings(BaseSettings):
    """Analytics system configuration (env vars use the ANALYTICS_ prefix)"""

    # Repository access
    QUERY_TIMEOUT_SECONDS: float = 10.0  # bound for one batch of concurrent queries

    # Trailing windows
    NOTIFICATION_WINDOW_DAYS: int = 30
    TREND_MONTHS: int = 6

    # Leaderboards
    LEADERBOARD_LIMIT: int = 10
    TOP_LIST_SIZE: int = 5
    RECENT_TRANSACTIONS_LIMIT: int = 5

    # Matchmaking
    MATCHMAKING_TOP_N: int = 20
    MATCHMAKING_CATEGORY_WEIGHT: float = 0.5
    MATCHMAKING_AUDIENCE_WEIGHT: float = 0.3
    MATCHMAKING_PERFORMANCE_WEIGHT: float = 0.2

    class Config:
        env_prefix = "ANALYTICS_"
        case_sensitive = True


# Global analytics settings instance
analytics_settings = AnalyticsSettings()


@dataclass(frozen=True)
class MatchmakingWeights:
    """Relative weights of the three matchmaking sub-scores"""
    category: float = 0.5
    audience: float = 0.3
    performance: float = 0.2

    @property
    def total(self) -> float:
        return self.category + self.audience + self.performance

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings = analytics_settings) -> "MatchmakingWeights":
        return cls(
            category=settings.MATCHMAKING_CATEGORY_WEIGHT,
            audience=settings.MATCHMAKING_AUDIENCE_WEIGHT,
            performance=settings.MATCHMAKING_PERFORMANCE_WEIGHT,
        )


@dataclass(frozen=True)
class MatchmakingConfig:
    weights: MatchmakingWeights = MatchmakingWeights()
    top_n: int = 20

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings = analytics_settings) -> "MatchmakingConfig":
        return cls(weights=MatchmakingWeights.from_settings(settings), top_n=settings.MATCHMAKING_TOP_N)


@dataclass(frozen=True)
class LeaderboardConfig:
    """
    Leaderboard ordering is fixed: summed value desc, completed payment
    count desc, subject id asc. Only the list sizes are configurable.
    """
    limit: int = 10
    top_list_size: int = 5

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings = analytics_settings) -> "LeaderboardConfig":
        return cls(limit=settings.LEADERBOARD_LIMIT, top_list_size=settings.TOP_LIST_SIZE)


class AnalyticsConstants:
    """Constants for the analytics system"""

    # Notification priorities
    PRIORITY_HIGH = "high"
    PRIORITY_MEDIUM = "medium"
    PRIORITY_LOW = "low"

    # Ecosystem graph edge weighting
    WEIGHT_BY_ASSIGNMENTS = "assignments"
    WEIGHT_BY_REVENUE = "revenue"

    UNCATEGORIZED = "Uncategorized"
