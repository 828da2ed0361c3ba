from typing import Iterable, List, Set

from models.comment import UnifiedComment

class ProcessedIdTracker:
    """Zbiór zewnętrznych ID już przetworzonych w danym zapytaniu"""

    def __init__(self):
        self._seen: Set[str] = set()

    def mark(self, external_id: str) -> None:
        if external_id:
            self._seen.add(external_id)

    def is_processed(self, external_id: str) -> bool:
        return external_id in self._seen

    def filter_new(self, external_ids: Iterable[str]) -> List[str]:
        """Zwraca ID jeszcze nieprzetworzone (zachowuje kolejność, bez powtórzeń)"""
        result = []
        for external_id in external_ids:
            if external_id and external_id not in self._seen and external_id not in result:
                result.append(external_id)
        return result

    def __len__(self):
        return len(self._seen)

    def __contains__(self, external_id):
        return external_id in self._seen


def remove_duplicate_comments(comments: List[UnifiedComment]) -> List[UnifiedComment]:
    """Usuwa duplikaty po ID komentarza (zostaje pierwsze wystąpienie)"""
    seen_ids = set()
    unique = []

    for comment in comments:
        if comment.id and comment.id not in seen_ids:
            seen_ids.add(comment.id)
            unique.append(comment)

    return unique
