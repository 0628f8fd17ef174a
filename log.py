"""
Logging & audit utilities

Purpose: configure application logging and persist advisory traces for clinician review.

Input: medicine name, visited stages, prompt, raw model text, final advisory.

Output: a debug log line per advisory and, when AUDIT_LOG_DIR is set, a JSON trace file.

Example: creates logs/advisory_20260206_101502_004211.json.
"""
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional
import json
import logging

import config
from models import AdvisoryResult, AdvisoryStage

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_advisory(
    medicine: str,
    stages: Iterable[AdvisoryStage],
    prompt: str,
    raw_text: str,
    advisory: AdvisoryResult,
    audit_dir: Optional[str] = None,
) -> Optional[Path]:
    """Record one advisory run. Returns the trace file path when one was written."""
    record = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "medicine": medicine,
        "stages": [stage.value for stage in stages],
        "source": advisory.source.value,
        "patched": list(advisory.patched),
        "prompt_length": len(prompt),
        "raw_text_length": len(raw_text or ""),
        "prompt": prompt,
        "raw_text": raw_text,
        "advisory": advisory.to_dict(),
    }
    logger.debug(
        "[AUDIT] %s: source=%s patched=%s raw_text_length=%d",
        medicine, record["source"], record["patched"], record["raw_text_length"],
    )

    audit_dir = audit_dir or config.AUDIT_LOG_DIR
    if not audit_dir:
        return None

    directory = Path(audit_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"advisory_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(record, f, ensure_ascii=False, indent=2)
    return path
