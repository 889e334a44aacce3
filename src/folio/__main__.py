"""folio entrypoint.

Run with:
  python -m folio

Settings come from the environment (see folio.config); SESSION_SECRET is required.
"""

import os
import uvicorn

def main() -> None:
    host = os.getenv("FOLIO_HOST", "0.0.0.0")
    port = int(os.getenv("FOLIO_PORT", "8000"))
    reload = os.getenv("FOLIO_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    log_level = os.getenv("FOLIO_LOG_LEVEL", "info").lower()
    uvicorn.run("folio.app:create_app", factory=True, host=host, port=port, reload=reload, log_level=log_level)

if __name__ == "__main__":
    main()
