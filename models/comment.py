from dataclasses import dataclass, asdict, fields
from typing import Optional

CATEGORIES = ("positive", "neutral", "negative", "hateful", "violent", "spam")
PLATFORMS = ("instagram", "youtube")

@dataclass
class UnifiedComment:
    """Model danych: komentarz niezależny od platformy"""
    id: str
    text: str
    author: str
    timestamp: str  # ISO 8601, UTC
    platform: str  # "instagram"/"youtube"
    content_id: str
    content_title: str
    content_url: Optional[str] = None

    def to_dict(self):
        """Konwersja do słownika"""
        return asdict(self)

    def to_api_dict(self) -> dict:
        """Słownik dla odpowiedzi API (klucze camelCase)"""
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author,
            "timestamp": self.timestamp,
            "platform": self.platform,
            "contentId": self.content_id,
            "contentTitle": self.content_title,
            "contentUrl": self.content_url,
        }

    def to_classifier_input(self) -> dict:
        """Pola przekazywane do klasyfikatora"""
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Tworzenie ze słownika"""
        return cls(
            id=str(data.get("id", "")),
            text=data.get("text") or "",
            author=data.get("author") or "",
            timestamp=data.get("timestamp") or "",
            platform=data.get("platform") or "",
            content_id=data.get("content_id") or "",
            content_title=data.get("content_title") or "",
            content_url=data.get("content_url"),
        )


@dataclass
class ClassifiedComment(UnifiedComment):
    """Model danych: komentarz po klasyfikacji"""
    category: str = "neutral"
    sentiment: float = 0.0  # -1..1
    toxicity: float = 0.0  # 0..1
    reasoning: Optional[str] = None

    def __post_init__(self):
        # Walidacja wartości zwróconych przez klasyfikator
        if self.category not in CATEGORIES:
            self.category = "neutral"
        self.sentiment = _clamp(self.sentiment, -1.0, 1.0)
        self.toxicity = _clamp(self.toxicity, 0.0, 1.0)

    @classmethod
    def from_unified(cls, comment: UnifiedComment, classification: Optional[dict] = None):
        """Łączy komentarz z wynikiem klasyfikacji (brak wyniku = wartości domyślne)"""
        classification = classification or {}
        return cls(
            **{f.name: getattr(comment, f.name) for f in fields(UnifiedComment)},
            category=classification.get("category") or "neutral",
            sentiment=classification.get("sentiment", 0.0),
            toxicity=classification.get("toxicity", 0.0),
            reasoning=classification.get("reasoning"),
        )

    @classmethod
    def from_dict(cls, data: dict):
        base = UnifiedComment.from_dict(data)
        return cls.from_unified(base, data)

    def to_api_dict(self) -> dict:
        data = super().to_api_dict()
        data.update({
            "category": self.category,
            "sentiment": self.sentiment,
            "toxicity": self.toxicity,
            "reasoning": self.reasoning,
        })
        return data

    def to_summary_input(self) -> dict:
        """Pola przekazywane do podsumowania"""
        return {
            "text": self.text,
            "category": self.category,
            "sentiment": self.sentiment,
            "toxicity": self.toxicity,
            "reasoning": self.reasoning or "",
        }


def _clamp(value, low: float, high: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(low, min(high, value))
