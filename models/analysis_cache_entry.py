from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from .comment import ClassifiedComment

MAX_CACHED_COMMENTS = 150

PLATFORM_FILTERS = ("all", "instagram", "youtube")
TIME_RANGES = ("24h", "7d", "28d", "1y", "5y")

@dataclass
class CommentSummary:
    """Model danych: podsumowanie analizy komentarzy"""
    total_comments: int = 0
    positive_count: int = 0
    neutral_count: int = 0
    negative_count: int = 0
    hateful_count: int = 0
    violent_count: int = 0
    spam_count: int = 0
    average_sentiment: float = 0.0
    critical_insights: str = "Brak komentarzy do analizy."
    top_concerns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self):
        """Konwersja do słownika (klucze camelCase dla API)"""
        return {
            "totalComments": self.total_comments,
            "positiveCount": self.positive_count,
            "neutralCount": self.neutral_count,
            "negativeCount": self.negative_count,
            "hatefulCount": self.hateful_count,
            "violentCount": self.violent_count,
            "spamCount": self.spam_count,
            "averageSentiment": self.average_sentiment,
            "criticalInsights": self.critical_insights,
            "topConcerns": list(self.top_concerns),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Tworzenie ze słownika"""
        return cls(
            total_comments=data.get("totalComments", 0),
            positive_count=data.get("positiveCount", 0),
            neutral_count=data.get("neutralCount", 0),
            negative_count=data.get("negativeCount", 0),
            hateful_count=data.get("hatefulCount", 0),
            violent_count=data.get("violentCount", 0),
            spam_count=data.get("spamCount", 0),
            average_sentiment=data.get("averageSentiment", 0.0),
            critical_insights=data.get("criticalInsights", ""),
            top_concerns=data.get("topConcerns") or [],
            recommendations=data.get("recommendations") or [],
        )


@dataclass
class AnalysisCacheEntry:
    """Model danych: zapis analizy w cache dla (user, platforma, zakres czasu)"""
    user_id: str
    platform: str  # "all"/"instagram"/"youtube"
    time_range: str  # "24h"/"7d"/"28d"/"1y"/"5y"
    comments: List[ClassifiedComment] = field(default_factory=list)
    summary: Optional[CommentSummary] = None  # None = checkpoint w trakcie klasyfikacji
    refreshed_at: datetime = None
    expires_at: datetime = None

    def __post_init__(self):
        if len(self.comments) > MAX_CACHED_COMMENTS:
            raise ValueError(
                f"Wpis cache może mieć maksymalnie {MAX_CACHED_COMMENTS} komentarzy "
                f"(otrzymano {len(self.comments)})"
            )

    @property
    def key(self) -> tuple:
        return (self.user_id, self.platform, self.time_range)

    def is_partial(self) -> bool:
        """Checkpoint bez podsumowania (np. przerwana klasyfikacja)"""
        return self.summary is None

    def to_dict(self):
        """Konwersja do słownika"""
        return {
            "user_id": self.user_id,
            "platform": self.platform,
            "time_range": self.time_range,
            "comments": [c.to_dict() for c in self.comments],
            "summary": self.summary.to_dict() if self.summary else None,
            "refreshed_at": self.refreshed_at.isoformat() if self.refreshed_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Tworzenie ze słownika"""
        summary = data.get("summary")
        return cls(
            user_id=data["user_id"],
            platform=data["platform"],
            time_range=data["time_range"],
            comments=[ClassifiedComment.from_dict(c) for c in data.get("comments", [])],
            summary=CommentSummary.from_dict(summary) if summary else None,
            refreshed_at=datetime.fromisoformat(data["refreshed_at"]) if data.get("refreshed_at") else None,
            expires_at=datetime.fromisoformat(data["expires_at"]) if data.get("expires_at") else None,
        )
