"""
Production entrypoint for the AVM Engine.

Binds to 0.0.0.0:$PORT.
"""

import uvicorn

from utils.config import Config
from utils.logging import setup_logging

if __name__ == "__main__":
    config = Config.load()
    setup_logging(config.log_level, config.log_format)

    print(f"Starting AVM Engine on port {config.port}")

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=config.port)
