#!/usr/bin/env python3
"""
CLI for acnc-docs - test tools without MCP restart

Usage:
  acnc-docs list-tools                            # Show MCP tool definitions
  acnc-docs fetch "11 005 357 522"                # Latest AIS + financial report
  acnc-docs fetch 11005357522 --pdf-text full     # Also extract the full (capped) text
  acnc-docs fetch 11005357522 --pdf-text none     # Skip PDF download entirely
  acnc-docs fetch 11005357522 --json              # Raw JSON instead of BBG Lite

Fast iteration: Uses hexagonal core directly (no MCP or HTTP layer).
Settings come from the same environment variables as the server.
"""

import argparse
import asyncio
import json
import logging
import sys

from .config import Settings
from .container import Container
from .adapters.mcp import TOOL_SCHEMAS, MCPHandlers
from .formatters import format_fetch_financials


async def list_tools_command() -> int:
    """Show MCP tool definitions"""
    print("=" * 80)
    print("MCP TOOL DEFINITIONS")
    print("=" * 80)
    print()

    for tool_name, tool_schema in TOOL_SCHEMAS.items():
        print(f"Tool: {tool_schema['name']}")
        print(f"Claude sees: mcp__acnc-docs__{tool_schema['name']}")
        print()
        print("Description:")
        print(tool_schema['description'])
        print()
        print("Input Schema:")
        print(json.dumps(tool_schema['inputSchema'], indent=2))
        print()
        print("-" * 80)
        print()

    return 0


async def fetch_command(
    abn: str,
    pdf_text: str | None,
    as_json: bool,
    settings: Settings,
) -> int:
    """Look up an ABN on the ACNC register"""
    try:
        container = Container(settings)
        handlers = MCPHandlers(container)

        result = await handlers.fetch_acnc_financials(abn=abn, pdf_text=pdf_text)

        if as_json:
            print(json.dumps(result, indent=2))
        else:
            print(format_fetch_financials(result))

        if not result["success"]:
            return 1

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


def main():
    parser = argparse.ArgumentParser(
        description="acnc-docs CLI - Test MCP tools without server restart"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log strategy progress to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # list-tools command
    subparsers.add_parser("list-tools", help="Show MCP tool definitions")

    # fetch command
    fetch_parser = subparsers.add_parser("fetch", help="Fetch latest ACNC documents for an ABN")
    fetch_parser.add_argument("abn", help="Australian Business Number (e.g., '11 005 357 522')")
    fetch_parser.add_argument(
        "--pdf-text",
        choices=["none", "preview", "full"],
        default=None,
        help="Financial report text (default: preview, or none when SCRAPER_PREVIEW=false)"
    )
    fetch_parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the raw result as JSON"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr
    )

    # Run command
    if args.command == "list-tools":
        return asyncio.run(list_tools_command())
    elif args.command == "fetch":
        return asyncio.run(fetch_command(
            abn=args.abn,
            pdf_text=args.pdf_text,
            as_json=args.as_json,
            settings=settings
        ))
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
