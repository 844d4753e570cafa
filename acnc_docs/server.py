"""
acnc-docs MCP Server

MCP delivery layer - wraps the fetch-financials use case as an MCP tool.
Separation of concerns: this file only handles MCP protocol.
"""
import argparse
import logging
import os
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .container import Container
from .adapters.mcp import MCPHandlers

# Suppress INFO logs
logging.getLogger("pypdf").setLevel(logging.ERROR)
logging.getLogger("httpx").setLevel(logging.WARNING)

# Get port from env or default
HTTP_PORT = int(os.getenv("ACNC_DOCS_MCP_PORT", "6661"))
HTTP_HOST = os.getenv("ACNC_DOCS_MCP_HOST", "0.0.0.0")

# Initialize MCP server with HTTP config
mcp = FastMCP("acnc-docs", host=HTTP_HOST, port=HTTP_PORT)

_handlers: Optional[MCPHandlers] = None


def get_handlers() -> MCPHandlers:
    """Build handlers lazily so importing this module never reads the environment"""
    global _handlers
    if _handlers is None:
        _handlers = MCPHandlers(Container())
    return _handlers


@mcp.tool()
async def fetch_acnc_financials(abn: str, pdf_text: Optional[str] = None) -> dict:
    """
    Find a charity's latest Annual Information Statement and Financial Report.

    Looks the ABN up on the ACNC register, lists the charity's annual
    reporting documents, and picks the newest AIS and financial report.
    Optionally downloads the financial report PDF and returns its text.

    Args:
        abn: Australian Business Number, 11 digits (spaces allowed)
        pdf_text: "none", "preview" (short excerpt), or "full" (capped text).
            Defaults to preview unless the server is configured otherwise.

    Returns:
        Dictionary with acnc_detail_url, latest {ais, financial_report},
        all_documents, optional text, and advisory notes.
        On failure: {success: False, error, step, abn}.

    Example:
        fetch_acnc_financials("11 005 357 522")
        → {latest: {financial_report: {year: 2023, source_url: "...pdf"}, ...}}

        fetch_acnc_financials("11005357522", pdf_text="full")
        → {pdf_text: "Statement of financial position ...", ...}
    """
    return await get_handlers().fetch_acnc_financials(abn=abn, pdf_text=pdf_text)


def main():
    """Main entry point for the MCP server."""
    parser = argparse.ArgumentParser(
        description="acnc-docs: latest ACNC annual reporting documents, as an MCP."
    )
    parser.add_argument(
        "--transport",
        default="stdio",
        choices=["stdio", "streamable-http"],
        help="Transport method (default: stdio)"
    )
    parser.add_argument(
        "--host",
        default=HTTP_HOST,
        help=f"Host to bind to for HTTP transport (default: {HTTP_HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=HTTP_PORT,
        help=f"Port to bind to for HTTP transport (default: {HTTP_PORT})"
    )
    args = parser.parse_args()

    # Run the server
    if args.transport == "streamable-http":
        mcp.settings.host = args.host
        mcp.settings.port = args.port
        print(f"Starting acnc-docs on http://{args.host}:{args.port}")
        mcp.run(transport="streamable-http")
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
