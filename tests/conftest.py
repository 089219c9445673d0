"""
Shared fixtures: temporary document store, generated Pillow images and a
FastAPI TestClient bound to the temporary store.
"""
import os
import tempfile
from io import BytesIO

# Must be set before coinrecord.main is imported (it creates dirs and logs)
os.environ.setdefault("COINS_DATA_DIR", tempfile.mkdtemp(prefix="coinrecord-tests-"))

import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from coinrecord.models import CoinForm  # noqa: E402
from coinrecord.storage import JsonStore  # noqa: E402


def build_image(size, fmt="PNG", noise=False, quality=95) -> bytes:
    """Encode a flat-colour or random-noise RGB image of the given size."""
    w, h = size
    if noise:
        img = Image.frombytes("RGB", size, os.urandom(w * h * 3))
    else:
        img = Image.new("RGB", size, (184, 134, 11))
    if fmt == "GIF":
        img = img.convert("P")
    buf = BytesIO()
    if fmt == "JPEG":
        img.save(buf, format=fmt, quality=quality)
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image():
    return build_image


@pytest.fixture()
def store(tmp_path):
    return JsonStore(str(tmp_path / "coins.json"))


@pytest.fixture()
def coin_fields():
    """Valid form payload, keyed the way the HTTP form sends it."""
    return {
        "coinNo": "C-001",
        "value": "1 Rupee",
        "material": "Silver",
        "country": "India",
        "year": "1947",
        "mint": "Bombay",
        "coinPresentValue": "2500",
        "description": "King George VI, quarter rupee",
        "remark": "",
    }


@pytest.fixture()
def coin_form(coin_fields):
    return CoinForm.model_validate(coin_fields)


@pytest.fixture()
def client(store, monkeypatch):
    from fastapi.testclient import TestClient

    import coinrecord.main as main

    monkeypatch.setattr(main, "store", store)
    return TestClient(main.app)
