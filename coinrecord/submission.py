from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from .models import CoinForm, CoinRecord
from .storage import MAX_DOCUMENT_BYTES, document_size
from .utils import now_iso

logger = logging.getLogger(__name__)

COLLECTION = "coins"
MAX_DOCUMENT_SIZE = MAX_DOCUMENT_BYTES

class DuplicateCoinError(Exception):
    def __init__(self, coin_no: str):
        super().__init__("A coin with this Coin No already exists.")
        self.coin_no = coin_no

class DocumentTooLargeError(Exception):
    def __init__(self, size: int):
        super().__init__(
            f"Document size ({size / 1024:.2f} KB) exceeds the 1 MB document limit. "
            "Please use smaller images."
        )
        self.size = size

def estimate_document_size(document: Dict[str, Any]) -> int:
    """Tamaño en bytes que medirá el almacén para este documento"""
    return document_size(document)

def check_document_size(document: Dict[str, Any]) -> int:
    size = estimate_document_size(document)
    if size >= MAX_DOCUMENT_SIZE:
        raise DocumentTooLargeError(size)
    return size

def coin_no_exists(store, coin_no: str) -> bool:
    """
    Consulta si ya hay una moneda con ese número.
    Si la consulta falla se responde False (no bloquea el alta).
    """
    if not coin_no:
        return False
    try:
        return bool(store.query(COLLECTION, where=("coinNo", "==", coin_no)))
    except Exception as e:
        logger.error(f"Error checking Coin No '{coin_no}': {e}")
        return False

def submit_coin(
    store,
    form: CoinForm,
    front_image: Optional[str] = None,
    back_image: Optional[str] = None,
    created_at: Optional[str] = None,
) -> CoinRecord:
    if coin_no_exists(store, form.coin_no):
        logger.warning(f"Duplicate Coin No rejected: {form.coin_no}")
        raise DuplicateCoinError(form.coin_no)

    photos: List[str] = [p for p in (front_image, back_image) if p]
    record = CoinRecord.from_form(form, photos=photos, created_at=created_at or now_iso())
    document = record.to_document()

    try:
        size = check_document_size(document)
    except DocumentTooLargeError as e:
        logger.warning(f"Coin '{form.coin_no}' rejected: {e}")
        raise

    record.id = store.add(COLLECTION, document)
    logger.info(f"Coin added: {record.id} (Coin No {form.coin_no}, {size} bytes, {len(photos)} photos)")
    return record
