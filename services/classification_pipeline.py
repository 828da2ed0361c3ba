"""
Pipeline klasyfikacji - scala komentarze, klasyfikuje partiami po 50 i zapisuje
checkpoint do cache po każdej partii, na końcu generuje podsumowanie.

Stany: UNCLASSIFIED → CLASSIFYING(k) → PARTIALLY_CACHED(k) → ... → ALL_CLASSIFIED
       → SUMMARIZING → CACHED
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from models.analysis_cache_entry import AnalysisCacheEntry, CommentSummary, MAX_CACHED_COMMENTS
from models.comment import ClassifiedComment, UnifiedComment
from services.cache_policy import expiry_for
from services.cache_store import CacheStore
from services.dedup import remove_duplicate_comments
from services.gemini_service import GeminiService
from services.logger import LoggerService
from utils.helpers import timestamp_sort_key, utc_now

CHUNK_SIZE = 50

class PipelineState(str, Enum):
    UNCLASSIFIED = "unclassified"
    CLASSIFYING = "classifying"
    PARTIALLY_CACHED = "partially_cached"
    ALL_CLASSIFIED = "all_classified"
    SUMMARIZING = "summarizing"
    CACHED = "cached"


@dataclass
class PipelineResult:
    entry: AnalysisCacheEntry
    total_collected: int
    truncated: bool


def merge_and_cap(comments: List[UnifiedComment], limit: int = MAX_CACHED_COMMENTS) -> List[UnifiedComment]:
    """Usuwa duplikaty, sortuje od najnowszych i obcina do limitu"""
    unique = remove_duplicate_comments(comments)
    ordered = sorted(unique, key=lambda c: timestamp_sort_key(c.timestamp), reverse=True)
    return ordered[:limit]


class CommentClassificationPipeline:
    """Klasyfikacja z zapisem przyrostowym do CacheStore"""

    def __init__(
        self,
        cache_store: CacheStore,
        classifier=None,
        summarizer=None,
        chunk_size: int = CHUNK_SIZE,
        max_comments: int = MAX_CACHED_COMMENTS,
        clock: Callable = utc_now,
        progress_callback: Optional[Callable] = None
    ):
        self.cache_store = cache_store
        self.classifier = classifier
        self.summarizer = summarizer
        self.chunk_size = chunk_size
        self.max_comments = max_comments
        self.clock = clock
        self.progress_callback = progress_callback
        self.logger = LoggerService()

        self.state = PipelineState.UNCLASSIFIED
        self.chunk_index = 0

    def run(self, user_id: str, platform: str, time_range: str, comments: List[UnifiedComment]) -> PipelineResult:
        """Główna funkcja pipeline'u"""
        self._set_state(PipelineState.UNCLASSIFIED)
        total_collected = len(remove_duplicate_comments(comments))
        limited = merge_and_cap(comments, self.max_comments)
        truncated = total_collected > len(limited)

        # Brak komentarzy - tylko puste podsumowanie
        if not limited:
            self._set_state(PipelineState.SUMMARIZING)
            summary = self._summarize([])
            entry = self._write(user_id, platform, time_range, [], summary)
            self._set_state(PipelineState.CACHED)
            return PipelineResult(entry=entry, total_collected=total_collected, truncated=truncated)

        total_chunks = (len(limited) + self.chunk_size - 1) // self.chunk_size
        self._log(f"Rozpoczynam klasyfikację {len(limited)} komentarzy ({total_chunks} partii)")

        classified: List[ClassifiedComment] = []
        for chunk_index, start in enumerate(range(0, len(limited), self.chunk_size), start=1):
            chunk = limited[start:start + self.chunk_size]
            self.chunk_index = chunk_index
            self._set_state(PipelineState.CLASSIFYING, chunk_index / (total_chunks + 1))

            classified.extend(self._classify_chunk(chunk, chunk_index))

            # Checkpoint: summary=None
            self._write(user_id, platform, time_range, classified, None)
            self._set_state(PipelineState.PARTIALLY_CACHED, chunk_index / (total_chunks + 1))
            self._log(f"Zapisano {len(classified)} sklasyfikowanych komentarzy do cache")

        self._set_state(PipelineState.ALL_CLASSIFIED)

        self._set_state(PipelineState.SUMMARIZING)
        summary = self._summarize([c.to_summary_input() for c in classified])

        entry = self._write(user_id, platform, time_range, classified, summary)
        self._set_state(PipelineState.CACHED, 1.0)
        self._log("Zapis końcowy z podsumowaniem zakończony")

        return PipelineResult(entry=entry, total_collected=total_collected, truncated=truncated)

    def classify_all(self, comments: List[UnifiedComment]) -> Tuple[List[ClassifiedComment], CommentSummary]:
        """Klasyfikacja bez cache: wszystkie komentarze, kolejność wejściowa, bez deduplikacji"""
        classified: List[ClassifiedComment] = []
        for chunk_index, start in enumerate(range(0, len(comments), self.chunk_size), start=1):
            self.chunk_index = chunk_index
            classified.extend(self._classify_chunk(comments[start:start + self.chunk_size], chunk_index))

        return classified, self._summarize([c.to_summary_input() for c in classified])

    def _classify_chunk(self, chunk: List[UnifiedComment], chunk_index: int) -> List[ClassifiedComment]:
        """Błąd klasyfikatora → cała partia z wartościami domyślnymi"""
        results = []
        try:
            results = self._classifier().classify_comments([c.to_classifier_input() for c in chunk]) or []
        except Exception as e:
            self._log(f"Klasyfikacja partii {chunk_index} nie powiodła się: {str(e)}", "ERROR")

        by_id = {r.get("id"): r for r in results if isinstance(r, dict)}
        return [ClassifiedComment.from_unified(comment, by_id.get(comment.id)) for comment in chunk]

    def _summarize(self, items: List[dict]) -> CommentSummary:
        """Błąd lub brak podsumowania → statystyki bez wniosków"""
        summary = None
        try:
            summary = self._summarizer().generate_comment_summary(items)
            if isinstance(summary, dict):
                summary = CommentSummary.from_dict(summary)
        except Exception as e:
            self._log(f"Błąd generowania podsumowania: {str(e)}", "ERROR")

        if isinstance(summary, CommentSummary):
            return summary

        # summary=None oznaczałby checkpoint
        summary = GeminiService.compute_statistics(items)
        if items:
            summary.critical_insights = "Nie udało się teraz wygenerować szczegółowych wniosków."
        return summary

    def _write(self, user_id, platform, time_range, classified, summary) -> AnalysisCacheEntry:
        refreshed_at = self.clock()
        entry = AnalysisCacheEntry(
            user_id=user_id,
            platform=platform,
            time_range=time_range,
            comments=list(classified),
            summary=summary,
            refreshed_at=refreshed_at,
            expires_at=expiry_for(time_range, refreshed_at),
        )
        self.cache_store.upsert(entry)
        return entry

    def _classifier(self):
        if self.classifier is None:
            self.classifier = GeminiService()
        return self.classifier

    def _summarizer(self):
        if self.summarizer is None:
            self.summarizer = GeminiService()
        return self.summarizer

    def _set_state(self, state: PipelineState, progress: float = None):
        self.state = state
        if self.progress_callback:
            self.progress_callback(state, progress)

    def _log(self, message: str, level: str = "INFO"):
        self.logger.add_log(message, level, context="Comments Pipeline")
