from __future__ import annotations
import math
import uuid
from datetime import datetime, timezone
from pathlib import Path

def now_iso() -> str:
    # ISO UTC con milisegundos, p.ej. 2024-05-01T10:20:30.123Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def new_id() -> str:
    return uuid.uuid4().hex[:20]

def round_half_up(x: float) -> int:
    """Redondeo 'clásico' (0.5 hacia arriba), no el bancario de round()"""
    return int(math.floor(x + 0.5))

def ensure_dir(p: str | Path) -> None:
    Path(p).mkdir(parents=True, exist_ok=True)
