"""Arranque del servidor: python -m coinrecord"""
import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "coinrecord.main:app",
        host=os.environ.get("COINS_HOST", "127.0.0.1"),
        port=int(os.environ.get("COINS_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
