"""
Assembles the final `SplitResult` and turns it into plain data.

The reporter only aggregates; rendering is left to the CLI. A run summary can
also be written as YAML, in the same layout the CLI prints.
"""
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import yaml
from loguru import logger

from ..domain.jobs import SideOutcome, SplitResult
from ..utils.format_utils import formatted_size


class ResultReporter:
    @staticmethod
    def build(
        input_path: Path,
        left: SideOutcome,
        right: SideOutcome,
        warnings: Sequence[str] = (),
        started_at: Optional[float] = None,
    ) -> SplitResult:
        """
        Creates the `SplitResult` once both sides have resolved.

        Args:
            input_path: The split input.
            left: Outcome of the left job.
            right: Outcome of the right job.
            warnings: Analysis warnings to carry through.
            started_at: `time.monotonic()` value taken when the run began.
        """
        elapsed = time.monotonic() - started_at if started_at is not None else 0.0
        return SplitResult(
            input_path=Path(input_path),
            left=left,
            right=right,
            warnings=tuple(warnings),
            elapsed_seconds=elapsed,
        )

    @staticmethod
    def side_to_dict(outcome: SideOutcome) -> dict:
        entry = {
            "side": str(outcome.side),
            "output_path": str(outcome.output_path),
            "status": "completed" if outcome.succeeded else "failed",
            "elapsed_seconds": round(outcome.elapsed_seconds, 2),
        }
        if outcome.succeeded:
            entry["size_bytes"] = outcome.size_bytes
            entry["size"] = formatted_size(outcome.size_bytes)
        else:
            entry["error_type"] = type(outcome.error).__name__
            entry["error"] = str(outcome.error)
            exit_code = getattr(outcome.error, "exit_code", None)
            if exit_code is not None:
                entry["exit_code"] = exit_code
        return entry

    @classmethod
    def to_dict(cls, result: SplitResult) -> dict:
        """Converts a result into a YAML/JSON-safe dictionary."""
        return {
            "input_path": str(result.input_path),
            "status": "completed" if result.succeeded else "failed",
            "elapsed_seconds": round(result.elapsed_seconds, 2),
            "warnings": list(result.warnings),
            "left": cls.side_to_dict(result.left),
            "right": cls.side_to_dict(result.right),
        }

    @classmethod
    def write_summary(cls, result: SplitResult, summary_path: Path) -> Path:
        """
        Writes the result summary to a YAML file, creating parent directories.

        Returns:
            The path written.
        """
        summary = cls.to_dict(result)
        summary["ended_datetime"] = datetime.now().isoformat(timespec="seconds")
        summary_path = Path(summary_path)
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        with summary_path.open("w", encoding="utf-8") as f:
            yaml.dump(
                summary,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                indent=4,
                width=220,
            )
        logger.info(f"Summary written to {summary_path}")
        return summary_path
