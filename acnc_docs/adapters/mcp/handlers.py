"""
MCP Tool Handlers

Shared handlers for MCP tools that use the hexagonal core.
"""
import logging
from typing import Any, Optional

from ...container import Container
from ...core.errors import AcncError

logger = logging.getLogger(__name__)


class MCPHandlers:
    """Handlers for MCP tools using dependency injection"""

    def __init__(self, container: Container):
        self.container = container

    async def fetch_acnc_financials(
        self,
        abn: str,
        pdf_text: Optional[str] = None
    ) -> dict[str, Any]:
        """Look up an ABN and return latest documents + optional PDF text"""
        try:
            result = await self.container.fetch_financials.execute(abn, pdf_text)

            return {
                "success": True,
                "strategy": result.strategy,
                **result.to_dict()
            }

        except AcncError as e:
            return {
                "success": False,
                **e.to_dict()
            }
        except Exception as e:
            logger.exception(f"fetch_acnc_financials: unexpected failure for {abn}")
            return {
                "success": False,
                "error": f"Failed to fetch ACNC financials: {str(e)}",
                "step": None,
                "abn": abn
            }
