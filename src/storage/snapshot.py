# src/storage/snapshot.py — v1
"""Read store snapshots and write inference results as JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError

from archinfer.storage.models import StoreSnapshot

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot file is missing or malformed."""


def load_snapshot(path: Path) -> StoreSnapshot:
    """Load and validate a StoreSnapshot from a JSON file.

    Raises:
        SnapshotError: If the file is missing, not JSON, or fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise SnapshotError(f"Snapshot not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot {path} must contain a JSON object")

    try:
        snapshot = StoreSnapshot(**data)
    except ValidationError as e:
        raise SnapshotError(f"Snapshot {path} failed validation: {e}") from e

    logger.info(
        "Loaded snapshot %s: %d call edges, %d import call edges, "
        "%d imports, %d flows",
        snapshot.codebase_id,
        len(snapshot.call_edges),
        len(snapshot.import_call_edges),
        len(snapshot.import_edges),
        len(snapshot.flows),
    )
    return snapshot


def dump_result(result: BaseModel | list[BaseModel] | dict) -> str:
    """Serialize a model, a list of models, or a plain dict to indented JSON."""
    if isinstance(result, BaseModel):
        return result.model_dump_json(indent=2)
    if isinstance(result, list):
        return json.dumps([item.model_dump(mode="json") for item in result], indent=2)
    return json.dumps(result, indent=2, default=str)


def write_result(result: BaseModel | list[BaseModel] | dict, path: Path) -> Path:
    """Write ``result`` as JSON to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_result(result), encoding="utf-8")
    logger.info("Wrote result to %s", path)
    return path
