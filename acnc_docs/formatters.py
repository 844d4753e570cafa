"""
BBG Lite formatters for MCP tool results

Format handler results as Bloomberg Terminal-inspired text output.
Used by both CLI and MCP adapters for consistent presentation.
"""

from typing import Any


def _latest_line(label: str, entry: dict[str, Any] | None) -> str:
    if not entry:
        return f"{label:<13}(none found)"
    return f"{label:<13}{entry['year']}  {entry['source_url']}"


def format_fetch_financials(result: dict[str, Any]) -> str:
    """Format fetch_acnc_financials result as BBG Lite text.

    Example output:
        ABN 11005357522 | ACNC DOCUMENTS | via http-strategy

        PROFILE:     https://www.acnc.gov.au/charity/charities/.../profile
        FIN REPORT:  2023  https://www.acnc.gov.au/.../financial-report-2023.pdf
        AIS:         2023  https://www.acnc.gov.au/.../ais-2023.pdf

        DOCUMENTS (4)
        ──────────────────────────────────────────────────────────────────────
        YEAR  TYPE              TITLE
        2023  AIS               2023 Annual Information Statement
        ...

        PREVIEW (800 chars)
        ──────────────────────────────────────────────────────────────────────
        ...
    """
    if not result.get("success"):
        step = result.get("step")
        step_str = f" [{step}]" if step else ""
        return f"ERROR{step_str}: {result.get('error', 'Unknown error')}"

    lines = []

    # Header
    strategy = result.get("strategy")
    via = f" | via {strategy}" if strategy else ""
    lines.append(f"ABN {result['abn']} | ACNC DOCUMENTS{via}")
    lines.append("")

    # Latest per type
    latest = result.get("latest", {})
    lines.append(f"{'PROFILE:':<13}{result['acnc_detail_url']}")
    lines.append(_latest_line("FIN REPORT:", latest.get("financial_report")))
    lines.append(_latest_line("AIS:", latest.get("ais")))
    lines.append("")

    # Full listing
    documents = result.get("all_documents", [])
    lines.append(f"DOCUMENTS ({len(documents)})")
    lines.append("─" * 70)
    lines.append(f"{'YEAR':<4}  {'TYPE':<16}  TITLE")
    for doc in documents:
        year = str(doc["year"]) if doc.get("year") else "----"
        lines.append(f"{year:<4}  {doc['type']:<16}  {doc['title']}")

    # Extracted text
    text = result.get("pdf_text")
    label = "PDF TEXT"
    if not text and result.get("preview"):
        text = result["preview"].get("financial_report_text_preview")
        label = "PREVIEW"
    if text:
        lines.append("")
        lines.append(f"{label} ({len(text):,} chars)")
        lines.append("─" * 70)
        lines.append(text.rstrip())

    # Advisory notes
    notes = result.get("notes") or []
    if notes:
        lines.append("")
        for note in notes:
            lines.append(f"NOTE: {note}")

    return "\n".join(lines)
