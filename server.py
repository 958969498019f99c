"""
Teapot API — Server
Runs the application under uvicorn on the configured host and port.

Usage:
    python server.py
    # or, once installed
    teapot-api
"""

import structlog
import uvicorn

from config import HOST, LOG_LEVEL, PORT

log = structlog.get_logger()


def main():
    log.info("teapot_api.serve", host=HOST, port=PORT)
    print(f"\n🫖  Teapot API listening on {HOST}:{PORT}\n")
    print(f"    curl http://{HOST}:{PORT}/teapots\n")
    uvicorn.run("main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
