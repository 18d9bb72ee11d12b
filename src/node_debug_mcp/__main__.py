"""Main entry point for Node Debug MCP Server.

Running this module will start the Node Debug MCP Server.
"""

import uvicorn

from node_debug_mcp.config import get_config
from node_debug_mcp.logging_utils import configure_root_logger, get_logger

logger = get_logger("main")


def main() -> None:
    """Run the Node Debug MCP Server."""
    config = get_config()
    configure_root_logger(config)

    # Import here so logging is configured before the app is built
    from node_debug_mcp.server import app

    logger.info(f"Starting Node Debug MCP Server on {config.HOST}:{config.PORT}")
    logger.info(f"MCP endpoint available at: http://{config.HOST}:{config.PORT}/mcp")
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
