from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class CorrectionResult:
    path: Path
    bandaids: int
    written: bool
    error: str | None = None


@dataclass
class CorrectionSummary:
    results: list[CorrectionResult] = field(default_factory=list)
    diffs_by_file: dict[Path, str] = field(default_factory=dict)
    combined_diff: str = ""

    @property
    def failed(self) -> list[CorrectionResult]:
        return [result for result in self.results if result.error is not None]

    @property
    def written(self) -> list[CorrectionResult]:
        return [result for result in self.results if result.written]

    @property
    def ok(self) -> bool:
        return not self.failed
