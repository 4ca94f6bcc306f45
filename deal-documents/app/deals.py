"""Deal persistence.

Deals are stored as JSON files in data/deals/, one ``<id>.json`` per
deal, holding the fields of ``DealRecord``. Files that are missing,
unreadable or fail validation are treated as absent.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from app.deal_record import DealRecord

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "deals"

_DEAL_ID_RE = re.compile(r"[A-Za-z0-9_-]+")


def _ensure_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def new_deal_id() -> str:
    return str(uuid.uuid4())[:8]


def is_valid_deal_id(deal_id: str) -> bool:
    return bool(_DEAL_ID_RE.fullmatch(deal_id or ""))


def _deal_path(deal_id: str) -> Path:
    """Path of a deal file. Raises ValueError for ids that are not a plain file stem."""
    if not is_valid_deal_id(deal_id):
        raise ValueError(f"Invalid deal id: {deal_id!r}")
    return DATA_DIR / f"{deal_id}.json"


def _read(path: Path) -> dict | None:
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Skipping unreadable deal file %s: %s", path.name, exc)
        return None
    return data if isinstance(data, dict) else None


def save_deal(deal: DealRecord) -> DealRecord:
    """Save or update a deal. Assigns an id when the record has none.

    Raises ValueError if the id is not made of letters, digits, "_" or "-".
    """
    if not deal.id:
        deal = deal.model_copy(update={"id": new_deal_id()})
    path = _deal_path(deal.id)
    _ensure_dir()

    now = datetime.now().isoformat()
    created_at = now
    if path.exists():
        existing = _read(path)
        if existing:
            created_at = existing.get("created_at", now)

    data = deal.model_dump()
    data["created_at"] = created_at
    data["updated_at"] = now
    path.write_text(json.dumps(data, indent=2))
    return deal


def load_deal(deal_id: str) -> DealRecord | None:
    """Load a deal by ID. Returns None if not found or invalid."""
    if not is_valid_deal_id(deal_id):
        return None
    path = _deal_path(deal_id)
    if not path.exists():
        return None
    data = _read(path)
    if data is None:
        return None
    try:
        return DealRecord.model_validate(data)
    except ValidationError as exc:
        logger.warning("Deal %s failed validation: %s", deal_id, exc)
        return None


def list_deals() -> list[dict]:
    """Return summary info for all saved deals, newest first."""
    _ensure_dir()
    deals = []
    for p in DATA_DIR.glob("*.json"):
        d = _read(p)
        if not d or "id" not in d:
            continue
        deals.append(
            {
                "id": d["id"],
                "name": d.get("name", ""),
                "street_address": d.get("street_address", ""),
                "closing_date": d.get("closing_date", ""),
                "updated_at": d.get("updated_at", ""),
            }
        )
    deals.sort(key=lambda d: d["updated_at"], reverse=True)
    return deals


def delete_deal(deal_id: str) -> bool:
    """Delete a deal. Returns True if the file existed."""
    if not is_valid_deal_id(deal_id):
        return False
    path = _deal_path(deal_id)
    if path.exists():
        path.unlink()
        return True
    return False
