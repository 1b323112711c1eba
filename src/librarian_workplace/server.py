"""Librarian Workplace Server - FastMCP Implementation

Exposes the library over the Model Context Protocol.

Features exposed:
- Resources: book catalog, available and given books, readers
- Tools: add/change/delete books and readers, take and return books

Clients connect over stdio or streamable HTTP, chosen by configuration.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from librarian_workplace.config import ServerConfig, get_config
from librarian_workplace.database.session import get_db_manager
from librarian_workplace.resources import all_resources
from librarian_workplace.tools import all_tools

logger = logging.getLogger(__name__)

config = get_config()

mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Librarian Workplace - the librarian's view of a small lending library. "
        "Use resources to browse books and readers, and tools to maintain the "
        "catalog and to give books to readers or take them back. A book can be "
        "taken while at least one of its copies is free; a reader holds at most "
        "one copy of each book."
    ),
)


def register_resources(server: FastMCP) -> None:
    for resource in all_resources:
        uri = resource.get("uri_template", resource.get("uri"))
        if not uri:
            logger.error("Resource missing URI: %s", resource)
            continue

        logger.debug("Registering resource: %s with URI: %s", resource["name"], uri)
        try:
            server.resource(
                uri=uri,
                name=resource["name"],
                description=resource["description"],
                mime_type=resource["mime_type"],
            )(resource["handler"])
        except Exception:
            logger.exception("Failed to register resource %s", resource["name"])
            raise

    logger.info("Registered %d resources", len(all_resources))


def register_tools(server: FastMCP) -> None:
    for tool in all_tools:
        logger.debug("Registering tool: %s", tool["name"])
        try:
            server.tool(
                name=tool["name"],
                description=tool["description"],
            )(tool["handler"])
        except Exception:
            logger.exception("Failed to register tool %s", tool["name"])
            raise

    logger.info("Registered %d tools", len(all_tools))


register_resources(mcp)
register_tools(mcp)


def configure_logging(server_config: ServerConfig) -> None:
    """Send log records to stderr; stdout carries the stdio transport."""
    logging.basicConfig(
        level=server_config.effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    if server_config.debug:
        logger.debug("Debug mode enabled - verbose protocol logging active")
    else:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


def prepare_database(server_config: ServerConfig) -> None:
    """Create missing tables before the first request is served."""
    db_manager = get_db_manager(server_config.get_database_url())
    db_manager.init_database()
    if not db_manager.verify_connection():
        raise RuntimeError(f"Cannot connect to database at {server_config.database_path}")
    logger.info("Database ready at %s", server_config.database_path)


def install_signal_handlers() -> None:
    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        get_db_manager().close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def run_stdio_server() -> None:
    """Run the MCP server using stdio transport.

    Stdin receives JSON-RPC requests, stdout sends responses.
    """
    logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)
    install_signal_handlers()

    try:
        logger.info("MCP Server ready and waiting for connections...")
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


def run_http_server() -> None:
    """Run the MCP server using the streamable HTTP transport."""
    logger.info(
        "Starting %s v%s on http://%s:%d",
        config.server_name,
        config.server_version,
        config.http_host,
        config.http_port,
    )
    install_signal_handlers()

    try:
        mcp.run(transport="streamable-http", host=config.http_host, port=config.http_port)
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


def main() -> None:
    """Main entry point for the MCP server.

    Started via ``librarian-workplace`` or ``python -m librarian_workplace.server``.
    """
    configure_logging(config)

    try:
        logger.info("=" * 60)
        logger.info("Librarian Workplace Server")
        logger.info("Version: %s", config.server_version)
        logger.info("Transport: %s", config.transport)
        logger.info("Debug Mode: %s", config.debug)
        logger.info("=" * 60)

        prepare_database(config)

        if config.transport == "stdio":
            run_stdio_server()
        elif config.transport == "streamable_http":
            run_http_server()
        else:
            logger.error("Unsupported transport: %s", config.transport)
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
