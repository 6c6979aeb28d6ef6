"""Entry point for running the client's control API with Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  port = int(os.getenv("SOCIAL_CLIENT_PORT", "8000"))
  host = os.getenv("SOCIAL_CLIENT_HOST", "127.0.0.1")
  reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
  uvicorn.run("social_client.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
  main()
