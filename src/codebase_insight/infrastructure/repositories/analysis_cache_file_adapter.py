import json
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from codebase_insight.core.application.ports import AnalysisCachePort
from codebase_insight.core.domain.analysis import CodebaseAnalysis
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger

logger = get_logger("analysis_cache")


class AnalysisCacheFileAdapter(AnalysisCachePort):
    """Keeps finished analyses in one JSON document, keyed by repository full name.

    Layout: ``{"synced_at": <iso|null>, "analyses": {"owner/repo": {...}}}``.
    Writes go to a temp file in the same directory and are moved into place.
    """

    def __init__(self, store_dir: Path) -> None:
        self.store_dir = store_dir
        self.file_path = store_dir / "analyses.json"

    async def put(self, repo: str, analysis: CodebaseAnalysis) -> None:
        data = self._read_json()
        data.setdefault("analyses", {})[repo] = analysis.to_wire()
        self._write_json(data)
        logger.info("Analysis cached", repo=repo, partial=analysis.partial)

    async def get(self, repo: str) -> CodebaseAnalysis | None:
        item = self._read_json().get("analyses", {}).get(repo)
        return self._load(repo, item) if item else None

    async def list_all(self) -> list[CodebaseAnalysis]:
        analyses = self._read_json().get("analyses", {})
        loaded = (self._load(repo, item) for repo, item in sorted(analyses.items()))
        return [analysis for analysis in loaded if analysis is not None]

    async def clear(self) -> None:
        self._write_json({"synced_at": None, "analyses": {}})
        logger.info("Analysis cache cleared")

    async def mark_synced(self) -> None:
        data = self._read_json()
        data["synced_at"] = datetime.now(UTC).isoformat()
        self._write_json(data)

    async def synced_at(self) -> str | None:
        return self._read_json().get("synced_at")

    # ── File internals ──

    @staticmethod
    def _load(repo: str, item: dict[str, Any]) -> CodebaseAnalysis | None:
        try:
            return CodebaseAnalysis.model_validate(item)
        except ValidationError as exc:
            logger.error(
                "Stored analysis is invalid, ignoring it",
                repo=repo,
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            return None

    def _read_json(self) -> dict[str, Any]:
        if not self.file_path.exists():
            return {}
        try:
            content = self.file_path.read_text(encoding="utf-8").strip()
            return json.loads(content) if content else {}
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read analysis cache, starting empty",
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            return {}

    def _write_json(self, data: dict[str, Any]) -> None:
        """Atomic write: write to temp file then rename."""
        self.store_dir.mkdir(parents=True, exist_ok=True)
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", dir=self.store_dir, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                json.dump(data, tmp, indent=2)
                tmp_path = tmp.name
            os.replace(tmp_path, self.file_path)
        except OSError as exc:
            logger.error(
                "Failed to write analysis cache",
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
