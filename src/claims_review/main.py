"""Claims Review server entry point.

Uses Hydra to load configuration and then starts the FastAPI application
via uvicorn.

Usage::

    poetry run python -m claims_review.main                       # default config
    poetry run python -m claims_review.main server.port=9000      # override
    poetry run python -m claims_review.main store.seed_on_startup=false
"""

from __future__ import annotations

import os

import hydra
import uvicorn
from dotenv import load_dotenv
from loguru import logger
from omegaconf import DictConfig

from claims_review.api.app import create_app

# Load .env BEFORE Hydra resolves ${oc.env:...} references
load_dotenv()


@hydra.main(version_base=None, config_path="../../conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Bootstrap the application from Hydra config and run uvicorn."""
    # Hydra may change the CWD to outputs/<date>/<time>/; go back to the project root
    os.chdir(hydra.utils.get_original_cwd())

    app = create_app(cfg)

    host: str = cfg.server.host
    port: int = cfg.server.port
    debug: bool = cfg.server.debug

    logger.info(
        "Starting server on {host}:{port} (debug={debug})",
        host=host,
        port=port,
        debug=debug,
    )

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info",
    )


if __name__ == "__main__":
    main()
