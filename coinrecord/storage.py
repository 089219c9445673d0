from __future__ import annotations
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .utils import new_id, ensure_dir

logger = logging.getLogger(__name__)

# Límite por documento del almacén (1 MiB)
MAX_DOCUMENT_BYTES = 1_048_576

Where = Tuple[str, str, Any]

class StoreError(Exception):
    """Escritura rechazada por el almacén"""

def document_size(data: Dict[str, Any]) -> int:
    """Bytes UTF-8 de la codificación JSON compacta del documento"""
    return len(json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))

class JsonStore:
    """
    Almacén de documentos en un único fichero JSON:
    data/coins.json -> {"version": 1, "collections": {"coins": [...]}}
    """
    def __init__(self, path: str):
        self.path = Path(path)
        ensure_dir(self.path.parent)
        self._lock = threading.Lock()
        if not self.path.exists():
            self._write({"version": 1, "collections": {}})

    def _read(self) -> Dict[str, Any]:
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, obj: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def _docs(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            db = self._read()
        return list(db.get("collections", {}).get(collection, []))

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        size = document_size(data)
        if size > MAX_DOCUMENT_BYTES:
            logger.error(f"Rejected write to '{collection}': document is {size} bytes")
            raise StoreError(f"Document exceeds the maximum size of {MAX_DOCUMENT_BYTES} bytes")

        doc_id = new_id()
        with self._lock:
            db = self._read()
            db.setdefault("collections", {}).setdefault(collection, []).append({"id": doc_id, **data})
            self._write(db)
        logger.debug(f"Document {doc_id} added to '{collection}' ({size} bytes)")
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        for d in self._docs(collection):
            if d.get("id") == doc_id:
                return d
        return None

    def query(
        self,
        collection: str,
        where: Optional[Where] = None,
        order_by: Optional[str] = None,
        direction: str = "asc",
    ) -> List[Dict[str, Any]]:
        docs = self._docs(collection)

        if where:
            field, op, value = where
            if op != "==":
                raise ValueError(f"Unsupported operator: {op}")
            docs = [d for d in docs if field in d and d[field] == value]

        if order_by:
            # como el almacén gestionado: los documentos sin el campo no aparecen
            docs = [d for d in docs if d.get(order_by) is not None]
            docs.sort(key=lambda d: d[order_by], reverse=(direction == "desc"))

        return docs
