# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""CashTracker entrypoint.

Run with:
  python -m cashtracker
"""

import os
import uvicorn

def main() -> None:
    host = os.getenv("CASHTRACKER_HOST", "0.0.0.0")
    port = int(os.getenv("CASHTRACKER_PORT", "8000"))
    reload = os.getenv("CASHTRACKER_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("cashtracker.app:app", host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
