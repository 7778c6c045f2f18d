"""ASO Keyword Intelligence.

Score app store keywords for difficulty, traffic and market opportunity on
Google Play and the App Store, from a live sample of competing apps.
"""

__version__ = "0.1.0"

from .core.models import ScoreResult, StoreConfig, StoreType
from .core.session import KeywordScoringSession

__all__ = ["KeywordScoringSession", "ScoreResult", "StoreConfig", "StoreType", "__version__"]
