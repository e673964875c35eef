"""Prometheus metrics declarations for codebase-insight.

All metrics are declared statically at module level.
Labels use ONLY static enumerations, never repository names.
"""

from prometheus_client import Counter, Histogram

# ── Child process metrics ─────────────────────────────────────────

CLI_PROCESS_RUNS_TOTAL = Counter(
    "codebase_insight_cli_process_runs_total",
    "Total supervised child process runs",
    ["command", "outcome"],
)

CLI_PROCESS_DURATION_SECONDS = Histogram(
    "codebase_insight_cli_process_duration_seconds",
    "Wall time of supervised child processes in seconds",
    ["command"],
    buckets=(1, 5, 15, 60, 300, 600, 1200, 2400, 3600),
)

# ── Analysis metrics ──────────────────────────────────────────────

ANALYSES_TOTAL = Counter(
    "codebase_insight_analyses_total",
    "Total repository analyses by provider and outcome",
    ["provider", "outcome"],
)

ANALYSIS_DURATION_SECONDS = Histogram(
    "codebase_insight_analysis_duration_seconds",
    "Per-repository analysis duration in seconds (clone to cache)",
    ["provider"],
    buckets=(5, 30, 60, 300, 600, 1200, 2400, 3600),
)
