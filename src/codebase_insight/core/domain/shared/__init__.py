from codebase_insight.core.domain.shared.codebase_provider_type import CodebaseProviderType

__all__ = ["CodebaseProviderType"]
