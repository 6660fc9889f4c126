"""Server entry point."""

import os

import uvicorn

from .api import app


def run():
    host = os.getenv("CLIENTIMPORT_HOST", "127.0.0.1")
    port = int(os.getenv("CLIENTIMPORT_PORT", "8000"))
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run()
