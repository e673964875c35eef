import json
from typing import Any

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from codebase_insight.core.domain.analysis import AnalysisDepth, CodebaseAnalysis, RunOptions
from codebase_insight.infrastructure.observability import tracing_setup


@pytest.fixture
def repo_name() -> str:
    return "acme/payments"


@pytest.fixture
def sample_analysis_dict(repo_name) -> dict[str, Any]:
    return {
        "repo": repo_name,
        "analyzedAt": "2026-01-15T10:00:00+00:00",
        "architecture": {
            "summary": "Layered service with a thin HTTP edge.",
            "modules": ["api", "core", "storage"],
            "concerns": ["src/api imports src/storage directly"],
        },
        "quality": {
            "summary": "Decent coverage in core.",
            "strengths": ["41 test files for 52 modules in src/core"],
            "weaknesses": ["No tests under src/api/middleware"],
        },
        "technicalDebt": {
            "summary": "Concentrated in the billing module.",
            "items": [
                {
                    "description": "Hand-rolled retry loop",
                    "location": "src/core/billing.py",
                    "severity": "High",
                    "evidence": "TODO: replace with backoff (line 88)",
                }
            ],
        },
        "risks": {"summary": "Old HTTP client.", "items": ["requests pinned to 2.19"]},
        "crossReference": None,
    }


@pytest.fixture
def sample_analysis_json(sample_analysis_dict) -> str:
    return json.dumps(sample_analysis_dict)


@pytest.fixture
def sample_analysis(sample_analysis_dict) -> CodebaseAnalysis:
    return CodebaseAnalysis.model_validate(sample_analysis_dict)


@pytest.fixture
def run_options() -> RunOptions:
    return RunOptions.for_depth(AnalysisDepth.STANDARD)


@pytest.fixture
def span_exporter(monkeypatch) -> InMemorySpanExporter:
    """Route spans opened through ``get_tracer`` into memory for the test."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setattr(
        tracing_setup,
        "get_tracer",
        lambda name=tracing_setup.TRACER_NAME: provider.get_tracer(name),
    )
    return exporter
