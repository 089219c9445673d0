from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from io import BytesIO
from typing import Iterable, List, Optional, Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from .images import decode_data_url
from .models import CoinRecord

logger = logging.getLogger(__name__)

# Coordenadas en mm, origen arriba a la izquierda (A4 = 210 x 297)
PAGE_W, PAGE_H = 210, 297
TOP = 20
BREAK_AT = 260        # si el cursor pasa de aquí, página nueva
BLOCK_GAP = 10        # separación entre monedas, no se dibuja
LEFT = 20
TEXT_WIDTH = 170
PHOTO_SIZE = 50
PHOTO_X = (20, 80)

FONT = "Helvetica"
LINE_FACTOR = 1.15

@dataclass
class TextOp:
    x: float
    y: float
    text: str
    size: float
    centered: bool = False
    max_width: Optional[float] = None

@dataclass
class ImageOp:
    x: float
    y: float
    w: float
    h: float
    image: ImageReader

Op = Union[TextOp, ImageOp]

@dataclass
class ReportPage:
    ops: List[Op] = field(default_factory=list)

    def texts(self) -> List[str]:
        return [op.text for op in self.ops if isinstance(op, TextOp)]

def _na(v: str) -> str:
    return v if v else "N/A"

def _load_photo(data_url: str) -> ImageReader:
    _, raw = decode_data_url(data_url)
    reader = ImageReader(BytesIO(raw))
    reader.getSize()  # fuerza la decodificación aquí y no al dibujar
    return reader

def _coin_block(index: int, coin: CoinRecord) -> tuple[List[Op], float]:
    """
    Operaciones de una moneda con y relativa al inicio del bloque.
    Devuelve (ops, alto dibujado), sin contar BLOCK_GAP.
    """
    y: float = 0
    ops: List[Op] = [TextOp(LEFT, y, f"Coin {index}", 14)]
    y += 10

    fields = [
        f"Coin No: {_na(coin.coin_no)}",
        f"Value: {coin.value}",
        f"Material: {_na(coin.material)}",
        f"Country: {_na(coin.country)}",
        f"Year: {coin.year}",
        f"Mint: {coin.mint}",
        f"Present Value: {coin.coin_present_value}",
    ]
    for line in fields:
        ops.append(TextOp(LEFT, y, line, 10))
        y += 6

    ops.append(TextOp(LEFT, y, f"Description: {coin.description}", 10, max_width=TEXT_WIDTH))
    y += 10
    ops.append(TextOp(LEFT, y, f"Remark: {_na(coin.remark)}", 10))
    y += 10

    if coin.photos:
        try:
            for x, photo in zip(PHOTO_X, coin.photos[:2]):
                ops.append(ImageOp(x, y, PHOTO_SIZE, PHOTO_SIZE, _load_photo(photo)))
            y += 60
        except Exception as e:
            logger.error(f"Error adding image of coin {coin.coin_no or coin.id} to PDF: {e}")
            ops.append(TextOp(LEFT, y, "Image unavailable", 10))
            y += 10

    return ops, y

def plan_report(coins: Iterable[CoinRecord]) -> List[ReportPage]:
    """Reparte las monedas en páginas. Un bloque nunca se parte entre dos páginas."""
    page = ReportPage()
    pages = [page]
    y: float = TOP

    page.ops.append(TextOp(PAGE_W / 2, y, "Coin Records", 20, centered=True))
    y += 15

    for i, coin in enumerate(coins, start=1):
        ops, height = _coin_block(i, coin)
        # página nueva si el cursor pasó la línea de corte o si el bloque no cabe en la hoja
        if y > BREAK_AT or (y + height > PAGE_H and page.ops):
            page = ReportPage()
            pages.append(page)
            y = TOP
        for op in ops:
            op.y += y
        page.ops.extend(ops)
        y += height + BLOCK_GAP

    return pages

def _draw_text(c: canvas.Canvas, op: TextOp) -> None:
    c.setFont(FONT, op.size)
    base = (PAGE_H - op.y) * mm
    if op.centered:
        c.drawCentredString(op.x * mm, base, op.text)
    elif op.max_width:
        leading = op.size * LINE_FACTOR
        for n, line in enumerate(simpleSplit(op.text, FONT, op.size, op.max_width * mm)):
            c.drawString(op.x * mm, base - n * leading, line)
    else:
        c.drawString(op.x * mm, base, op.text)

def render_report(coins: Iterable[CoinRecord]) -> bytes:
    pages = plan_report(coins)
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle("Coin Records")
    for n, page in enumerate(pages):
        if n:
            c.showPage()
        for op in page.ops:
            if isinstance(op, TextOp):
                _draw_text(c, op)
            else:
                # drawImage usa la esquina inferior izquierda
                c.drawImage(op.image, op.x * mm, (PAGE_H - op.y - op.h) * mm, op.w * mm, op.h * mm, mask="auto")
    c.save()
    logger.info(f"Report rendered: {len(pages)} pages")
    return buf.getvalue()

def report_filename(today: Optional[date] = None) -> str:
    # fecha UTC, como el resto de marcas de tiempo
    today = today or datetime.now(timezone.utc).date()
    return f"coin-records-{today.isoformat()}.pdf"
