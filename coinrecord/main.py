from __future__ import annotations
import os
import logging
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, UploadFile, File, Form, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import ValidationError

from .images import ImageIntakeError, compress_image
from .listing import CoinListView, SortKey, SortOrder, fetch_coins, next_photo_index
from .logging_config import setup_logging
from .models import CoinForm, CoinRecord
from .report import render_report, report_filename
from .storage import JsonStore
from .submission import (
    COLLECTION,
    DocumentTooLargeError,
    DuplicateCoinError,
    coin_no_exists,
    submit_coin,
)
from .utils import ensure_dir

# Cargar variables de entorno desde .env
BASE = Path(__file__).resolve().parent.parent
load_dotenv(BASE / ".env")
DATA_DIR = Path(os.environ.get("COINS_DATA_DIR", BASE / "data"))
DB_PATH = Path(os.environ.get("COINS_DB_PATH", DATA_DIR / "coins.json"))
LOG_DIR = Path(os.environ.get("COINS_LOG_DIR", DATA_DIR / "logs"))

ensure_dir(DATA_DIR)
setup_logging(LOG_DIR, level=os.environ.get("COINS_LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)
logger.info("=== Starting Coin Records ===")

store = JsonStore(str(DB_PATH))
logger.info(f"Store loaded from: {DB_PATH}")

app = FastAPI(title="Coin Records")

async def _intake(upload: Optional[UploadFile]) -> Optional[str]:
    """Lee el fichero subido y lo pasa por la compresión. Sin fichero -> None"""
    if upload is None:
        return None
    content = await upload.read()
    try:
        # Pillow bloquea: fuera del event loop
        return await run_in_threadpool(compress_image, content, upload.content_type)
    except ImageIntakeError as e:
        logger.warning(f"Image '{upload.filename}' rejected: {e}")
        raise HTTPException(400, str(e))

@app.get("/health")
def health():
    return {"status": "ok"}

@app.post("/api/images/compress")
async def api_compress_image(image: UploadFile = File(...)):
    return {"dataUrl": await _intake(image)}

@app.get("/api/coins/exists")
def api_coin_exists(coin_no: str = ""):
    return {"exists": coin_no_exists(store, coin_no)}

@app.post("/api/coins", status_code=201)
async def create_coin(
    coin_no: str = Form("", alias="coinNo"),
    value: str = Form(""),
    material: str = Form(""),
    country: str = Form(""),
    year: str = Form(""),
    mint: str = Form(""),
    coin_present_value: str = Form("", alias="coinPresentValue"),
    description: str = Form(""),
    remark: str = Form(""),
    front_image: Optional[UploadFile] = File(None, alias="frontImage"),
    back_image: Optional[UploadFile] = File(None, alias="backImage"),
):
    try:
        form = CoinForm(
            coin_no=coin_no, value=value, material=material, country=country, year=year,
            mint=mint, coin_present_value=coin_present_value, description=description, remark=remark,
        )
    except ValidationError as e:
        raise HTTPException(422, [{"field": err["loc"][0], "msg": err["msg"]} for err in e.errors()])

    front = await _intake(front_image)
    back = await _intake(back_image)

    try:
        record = await run_in_threadpool(submit_coin, store, form, front_image=front, back_image=back)
    except DuplicateCoinError as e:
        raise HTTPException(409, str(e))
    except DocumentTooLargeError as e:
        raise HTTPException(413, str(e))
    except Exception:
        logger.exception(f"Error adding coin '{form.coin_no}'")
        raise HTTPException(500, "Failed to add coin.")

    return record.model_dump(by_alias=True)

@app.get("/api/coins")
def list_coins(
    q: str = "",
    sort_by: SortKey = "createdAt",
    order: SortOrder = "desc",
    page: Optional[int] = Query(None, ge=1),
):
    view = CoinListView(fetch_coins(store, sort_by=sort_by, order=order))
    view.search(q)
    if page:
        view.go_to(page)
    return {
        "coins": [c.model_dump(by_alias=True) for c in view.items],
        "page": view.page,
        "total_pages": view.total_pages,
        "total": len(view.filtered),
    }

@app.get("/api/coins/report.pdf")
def download_report(q: str = "", sort_by: SortKey = "createdAt", order: SortOrder = "desc"):
    view = CoinListView(fetch_coins(store, sort_by=sort_by, order=order))
    view.search(q)
    pdf = render_report(view.filtered)
    filename = report_filename()
    logger.info(f"Report {filename}: {len(view.filtered)} coins")
    return Response(content=pdf, media_type="application/pdf", headers={
        "Content-Disposition": f"attachment; filename=\"{filename}\""
    })

@app.get("/api/coins/{coin_id}/photo")
def get_photo(coin_id: str, current: int = Query(0, ge=0), direction: Literal["next", "prev"] = "next"):
    doc = store.get(COLLECTION, coin_id)
    if not doc:
        raise HTTPException(404, "Coin not found")
    coin = CoinRecord.model_validate(doc)
    if not coin.photos:
        raise HTTPException(404, "Coin has no photos")
    idx = next_photo_index(current, len(coin.photos), direction)
    return {"index": idx, "photo": coin.photos[idx]}
