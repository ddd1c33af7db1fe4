import logging
import os

import uvicorn

from users_api.app import app

logger = logging.getLogger(__name__)

HOST = os.getenv("USERS_API_HOST", "127.0.0.1")
PORT = int(os.getenv("USERS_API_PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def setup_logging(level: str = "INFO"):
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


def main():
    setup_logging(LOG_LEVEL)
    logger.info("Serving on http://%s:%d", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
