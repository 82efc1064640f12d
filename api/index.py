"""
Vercel serverless entrypoint.

Re-exports the Medzy FastAPI app without the listener or background
services. Vercel sets VERCEL, so ``main.app`` is already built in
serverless mode there; anywhere else a serverless instance is built here.
"""

from pathlib import Path
import sys

backend_root = Path(__file__).resolve().parents[1]
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

import main  # noqa: E402
from config import IS_SERVERLESS  # noqa: E402

app = main.app if IS_SERVERLESS else main.create_app(serverless=True)

__all__ = ["app"]
