#!/usr/bin/env python3
"""
Run the Task Pulse API under uvicorn.

HOST, PORT and RELOAD come from the environment (or .env); pass --init-db
to create the schema and the default admin before serving.
"""

import os
import sys

import uvicorn
from dotenv import load_dotenv


def main():
    load_dotenv()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "true").lower() == "true"
    log_level = os.getenv("LOG_LEVEL", "info").lower()

    if "--init-db" in sys.argv:
        from create_tables import create_tables
        create_tables()

    print(f"Task Pulse API on http://{host}:{port} (reload={'on' if reload else 'off'}, log={log_level})")

    uvicorn.run("main:app", host=host, port=port, reload=reload, log_level=log_level)


if __name__ == "__main__":
    main()
