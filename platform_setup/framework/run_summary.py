from __future__ import annotations

import json
import os

from platform_setup.framework.pipeline import PipelineResult


def write_run_summary(path: str, result: PipelineResult) -> None:
    """Write a JSON summary of a (possibly failed) run, nested bootstrap runs included."""

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as file:
        json.dump(result.to_dict(), file, ensure_ascii=False, indent=2)
        file.write("\n")
