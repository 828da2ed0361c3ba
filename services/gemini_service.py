import json
import re
import google.generativeai as genai

from config import GEMINI_API_KEY, CLASSIFIER_BATCH_SIZE
from models.analysis_cache_entry import CommentSummary
from models.comment import CATEGORIES
from services.logger import LoggerService

# Prompt dla klasyfikacji komentarzy (moderator treści)
PROMPT_CLASSIFY = """Jesteś ekspertem moderacji treści analizującym komentarze z mediów społecznościowych.

Dla każdego komentarza określ:
1. Kategorię: positive, neutral, negative, hateful, violent lub spam
2. Sentyment: od -1 (bardzo negatywny) do 1 (bardzo pozytywny)
3. Toksyczność: od 0 (brak) do 1 (wysoce toksyczny)
4. Krótkie uzasadnienie klasyfikacji

<komentarze>
{data}
</komentarze>

Zwróć wynik wyłącznie jako listę JSON, według schematu:
[
  {{
    "index": 0,
    "category": "positive|neutral|negative|hateful|violent|spam",
    "sentiment": 0.5,
    "toxicity": 0.1,
    "reasoning": "Krótkie wyjaśnienie"
  }}
]

Bądź rygorystyczny przy kategoriach hateful i violent. Hateful obejmuje rasizm, seksizm, homofobię
i nienawiść religijną. Violent obejmuje groźby, nawoływanie do przemocy i drastyczne opisy."""

# Prompt dla podsumowania
PROMPT_SUMMARY = """Jesteś analitykiem mediów społecznościowych. Przeanalizuj statystyki komentarzy i podaj kluczowe wnioski.

<statystyki>
{stats}
</statystyki>

<problematyczne_komentarze>
{samples}
</problematyczne_komentarze>

Podaj:
1. Kluczowe wnioski (2-3 zdania o ogólnej kondycji komentarzy)
2. 3 najważniejsze problemy
3. 3 rekomendacje (konkretne działania)

Zwróć wynik w formacie JSON:
{{
  "criticalInsights": "tekst",
  "topConcerns": ["problem1", "problem2", "problem3"],
  "recommendations": ["rekomendacja1", "rekomendacja2", "rekomendacja3"]
}}"""

class GeminiService:
    """Serwis Gemini - klasyfikacja i podsumowanie komentarzy"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        genai.configure(api_key=GEMINI_API_KEY)
        self.flash_model = genai.GenerativeModel('gemini-2.5-flash')
        self.flash_lite_model = genai.GenerativeModel('gemini-2.5-flash-lite')
        self.logger = LoggerService()
        self.batch_size = CLASSIFIER_BATCH_SIZE
        self._initialized = True

    def classify_comments(self, comments: list[dict]) -> list[dict]:
        """
        Klasyfikuje komentarze partiami ({id, text, author, timestamp} → {id, category, ...})
        Używa: gemini-2.5-flash-lite
        Partia z błędem dostaje wartości domyślne.
        """
        results = []

        for start in range(0, len(comments), self.batch_size):
            batch = comments[start:start + self.batch_size]
            comments_text = "\n".join(f"[{idx}] {c.get('text', '')}" for idx, c in enumerate(batch))
            prompt = PROMPT_CLASSIFY.format(data=comments_text)

            try:
                response = self.flash_lite_model.generate_content(prompt)
                parsed = self.parse_json_response(response.text.strip())
                if isinstance(parsed, dict):
                    parsed = [parsed]

                for item in parsed:
                    if not isinstance(item, dict):
                        continue
                    try:
                        index = int(item.get("index"))
                    except (TypeError, ValueError):
                        continue
                    if 0 <= index < len(batch):
                        results.append(self._normalize_classification(batch[index]["id"], item))
            except Exception as e:
                self.logger.add_log(f"Błąd klasyfikacji partii {start // self.batch_size + 1}: {str(e)}",
                                    "WARNING", context="Classifier")
                results.extend(
                    {
                        "id": c["id"],
                        "category": "neutral",
                        "sentiment": 0,
                        "toxicity": 0,
                        "reasoning": "Klasyfikacja nie powiodła się",
                    }
                    for c in batch
                )

        return results

    def generate_comment_summary(self, items: list[dict]) -> CommentSummary:
        """
        Podsumowanie sklasyfikowanych komentarzy
        Używa: gemini-2.5-flash (wnioski); statystyki liczone lokalnie.
        Pusta lista → puste podsumowanie bez wywołania modelu.
        """
        summary = self.compute_statistics(items)
        if summary.total_comments == 0:
            return summary

        total = summary.total_comments
        stats_lines = [f"Łącznie komentarzy: {total}"]
        for category in CATEGORIES:
            count = getattr(summary, f"{category}_count")
            stats_lines.append(f"{category}: {count} ({count / total * 100:.1f}%)")
        stats_lines.append(f"Średni sentyment: {summary.average_sentiment:.2f}")

        problematic = [i for i in items if i.get("category") in ("hateful", "violent", "negative")][:10]
        samples = "\n".join(f"- [{i['category']}] {(i.get('text') or '')[:100]}" for i in problematic)

        prompt = PROMPT_SUMMARY.format(stats="\n".join(stats_lines), samples=samples or "brak")

        try:
            response = self.flash_model.generate_content(prompt)
            analysis = self.parse_json_response(response.text.strip())
            if not isinstance(analysis, dict):
                raise ValueError("Oczekiwano obiektu JSON")

            summary.critical_insights = analysis.get("criticalInsights") or "Analiza niedostępna"
            summary.top_concerns = list(analysis.get("topConcerns") or [])
            summary.recommendations = list(analysis.get("recommendations") or [])
        except Exception as e:
            self.logger.add_log(f"Błąd generowania podsumowania: {str(e)}", "WARNING", context="Summarizer")
            summary.critical_insights = "Nie udało się teraz wygenerować szczegółowych wniosków."
            summary.top_concerns = []
            summary.recommendations = []

        return summary

    @staticmethod
    def compute_statistics(items: list[dict]) -> CommentSummary:
        """Liczniki kategorii i średni sentyment"""
        summary = CommentSummary()
        if not items:
            return summary

        summary.total_comments = len(items)
        for item in items:
            category = item.get("category")
            if category in CATEGORIES:
                attr = f"{category}_count"
                setattr(summary, attr, getattr(summary, attr) + 1)

        summary.average_sentiment = sum(float(i.get("sentiment") or 0) for i in items) / len(items)
        summary.critical_insights = ""
        return summary

    def _normalize_classification(self, comment_id: str, item: dict) -> dict:
        category = str(item.get("category", "neutral")).lower()
        if category not in CATEGORIES:
            category = "neutral"

        return {
            "id": comment_id,
            "category": category,
            "sentiment": item.get("sentiment", 0),
            "toxicity": item.get("toxicity", 0),
            "reasoning": item.get("reasoning"),
        }

    def parse_json_response(self, response_text: str):
        """Parsuje JSON z odpowiedzi Gemini (może zwrócić list lub dict)"""
        original_text = response_text

        # Krok 1: Usuń markdown code blocks
        if "```json" in response_text:
            json_start = response_text.find("```json") + 7
            json_end = response_text.find("```", json_start)
            if json_end > json_start:
                response_text = response_text[json_start:json_end].strip()
        elif "```" in response_text:
            json_start = response_text.find("```") + 3
            json_end = response_text.find("```", json_start)
            if json_end > json_start:
                response_text = response_text[json_start:json_end].strip()

        # Krok 2: Spróbuj sparsować całość
        try:
            return json.loads(response_text)
        except json.JSONDecodeError:
            pass

        # Krok 3: Znajdź pierwszy kompletny JSON array lub object
        for opening, closing in (("[", "]"), ("{", "}")):
            json_start = response_text.find(opening)
            if json_start == -1:
                continue
            depth = 0
            for i in range(json_start, len(response_text)):
                if response_text[i] == opening:
                    depth += 1
                elif response_text[i] == closing:
                    depth -= 1
                    if depth == 0:
                        try:
                            return json.loads(response_text[json_start:i + 1])
                        except json.JSONDecodeError:
                            break

        # Krok 4: Fallback - wyciągnij obiekty wzorcem [{...}]
        json_pattern = r'\[\s*\{[^}]+\}(?:\s*,\s*\{[^}]+\})*\s*\]'
        matches = re.findall(json_pattern, original_text, re.DOTALL)
        if matches:
            try:
                return json.loads(matches[0])
            except json.JSONDecodeError:
                pass

        raise ValueError(f"Błąd parsowania JSON. Odpowiedź: {original_text[:500]}")
