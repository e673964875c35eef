from codebase_insight.infrastructure.configuration.app_config import AppConfig
from codebase_insight.infrastructure.configuration.codebase_analysis_settings import (
    CodebaseAnalysisSettings,
)

__all__ = ["AppConfig", "CodebaseAnalysisSettings"]
