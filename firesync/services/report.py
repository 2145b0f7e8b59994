"""Rendering and persistence of the sync run report."""

import json
import logging
from pathlib import Path
from typing import List

from ..models.run import SyncRun

logger = logging.getLogger(__name__)

WIDTH = 58


def _rule(left: str, right: str) -> str:
    return left + "═" * WIDTH + right


def _title(text: str) -> str:
    return "║" + text.center(WIDTH) + "║"


def render_banner(lines: List[str]) -> str:
    """Render the boxed header printed at the start of a run."""
    out = [_rule("╔", "╗")]
    out.extend(_title(line) for line in lines)
    out.append(_rule("╚", "╝"))
    return "\n".join(out)


def _status(errors: int) -> str:
    if errors == 0:
        return "OK  "
    if errors < 0:
        return "FAIL"
    return "WARN"


def render_summary(run: SyncRun) -> str:
    """
    Render the human-readable summary of a run.

    One line per collection with its status, nested lines per subcollection,
    then totals, duration and mode.
    """
    lines = [
        _rule("╔", "╗"),
        _title("SYNC SUMMARY"),
        _rule("╠", "╣"),
    ]

    for result in run.results:
        lines.append(
            f"║  {_status(result.errors)} {result.collection:<22} {result.synced:>5} records"
            + (f", {result.errors} errors" if result.errors > 0 else "")
        )
        for sub in result.subcollections:
            lines.append(
                f"║       {_status(sub.errors)} └─ {sub.name:<16} {sub.synced:>5} records"
                + (f", {sub.errors} errors" if sub.errors > 0 else "")
            )

    duration = run.duration_seconds or 0.0
    lines.extend([
        _rule("╠", "╣"),
        f"║  Total documents synced:  {run.total_synced:>6}",
        f"║  Total errors:            {run.total_errors:>6}",
        f"║  Duration:                {duration:>6.1f}s",
        f"║  Mode:                    {run.mode.label}",
        _rule("╚", "╝"),
    ])

    if run.fatal_collections:
        lines.append("")
        lines.append("Aborted collections:")
        for result in run.results:
            if result.is_fatal:
                lines.append(f"  {result.collection}: {result.error_message}")

    if run.total_errors > 0:
        lines.append("")
        lines.append("Some records failed to sync. Check the errors above.")
        lines.append("Tip: run with --force to overwrite conflicting records.")

    if run.dry_run:
        lines.append("")
        lines.append("This was a dry run. Run without --dry-run to actually sync data.")

    return "\n".join(lines)


def save_report(run: SyncRun, filepath: str) -> Path:
    """Save the run report as JSON."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(run.to_dict(), f, indent=2, default=str)
    logger.info(f"Saved sync report to {path}")
    return path
