from .logger import LoggerService
from .gemini_service import GeminiService
from .database_service import DatabaseService
from .cache_store import CacheStore, InMemoryCacheStore, SqliteCacheStore
from .content_store import ContentStore
from .account_store import AccountStore
from .identity_resolver import IdentityResolver
from .dedup import ProcessedIdTracker
from .instagram_collector import InstagramCollector
from .youtube_collector import YouTubeCollector
from .classification_pipeline import CommentClassificationPipeline
from .comment_orchestrator import CommentAnalysisOrchestrator

__all__ = [
    'LoggerService',
    'GeminiService',
    'DatabaseService',
    'CacheStore',
    'InMemoryCacheStore',
    'SqliteCacheStore',
    'ContentStore',
    'AccountStore',
    'IdentityResolver',
    'ProcessedIdTracker',
    'InstagramCollector',
    'YouTubeCollector',
    'CommentClassificationPipeline',
    'CommentAnalysisOrchestrator'
]
