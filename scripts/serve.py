from __future__ import annotations

import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    # When running as scripts/serve.py, sys.path[0] is scripts/, so `import src.*` fails.
    sys.path.insert(0, str(PROJECT_ROOT))


def main() -> int:
    load_dotenv()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "4000"))
    reload = str(os.getenv("RELOAD", "")).strip().lower() in ("1", "true", "yes")

    uvicorn.run(
        "src.api.app:app",
        host=host,
        port=port,
        reload=reload,
        # structlog owns the log format; keep uvicorn from installing its own handlers.
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
