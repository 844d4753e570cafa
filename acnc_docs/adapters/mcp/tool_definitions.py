"""
MCP Tool Definitions

Single source of truth for tool schemas and descriptions.
Used by both stdio and HTTP/SSE servers.
"""

# Tool schemas for MCP
TOOL_SCHEMAS = {
    "fetch_acnc_financials": {
        "name": "fetch_acnc_financials",
        "description": """Find a charity's latest Annual Information Statement and Financial Report on the ACNC register.

fetch_acnc_financials("11 005 357 522") → latest AIS + financial report URLs, all documents
fetch_acnc_financials("11005357522", pdf_text="full") → also the report's text (capped)
""",
        "inputSchema": {
            "type": "object",
            "properties": {
                "abn": {
                    "type": "string",
                    "description": "Australian Business Number, 11 digits (spaces allowed)"
                },
                "pdf_text": {
                    "type": "string",
                    "enum": ["none", "preview", "full"],
                    "description": "Financial report text: none, short preview, or full capped text"
                }
            },
            "required": ["abn"]
        }
    }
}
