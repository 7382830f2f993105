#!/usr/bin/env python3
# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Shopify MCP server entrypoint
Run with: python -m shopify_mcp.main [catalog.timeout=5 server.port=8080 ...]
"""

import logging
import sys

import hydra
from omegaconf import DictConfig

from shopify_mcp.config import Settings
from shopify_mcp.errors import ConfigError
from shopify_mcp.server import create_app

logger = logging.getLogger(__name__)


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Validate configuration and serve the MCP app"""
    log_level = str(cfg.get("log_level", "INFO")).upper()
    logging.basicConfig(level=log_level)
    # Hydra installs the root handler before we get here
    logging.getLogger().setLevel(log_level)

    # Suppress verbose access logging
    logging.getLogger("hypercorn.access").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    try:
        settings = Settings.from_config(cfg).validate()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    app = create_app(settings)
    logger.info(f"MCP server running at http://localhost:{settings.server.port}")
    app.run(host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
