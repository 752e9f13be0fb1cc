"""Outbound relay of dashboard events to the automation platform"""

from datetime import datetime
from typing import Any, Dict, Optional

import httpx
import structlog

from restodesk.config import settings
from restodesk.errors import UpstreamIntegrationError

logger = structlog.get_logger()


class AutomationRelay:
    """Posts JSON events to the automation platform's inbound hook"""
    
    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport
    
    async def send(self, event: Dict[str, Any]) -> int:
        """Send one event, returning the upstream HTTP status"""
        if not self.url:
            raise UpstreamIntegrationError("Automation relay URL is not configured")
        
        event.setdefault("timestamp", datetime.utcnow().isoformat())
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=event)
        except httpx.HTTPError as e:
            logger.error("Automation relay unreachable", error=str(e))
            raise UpstreamIntegrationError(f"Automation platform unreachable: {e}") from e
        
        if response.is_error:
            logger.error(
                "Automation relay rejected event",
                status=response.status_code,
                body=response.text[:500],
            )
            raise UpstreamIntegrationError(
                f"Automation platform returned {response.status_code}: {response.text[:200]}"
            )
        
        logger.info("Event relayed", type=event.get("type"), status=response.status_code)
        return response.status_code


def get_relay() -> AutomationRelay:
    """Dependency providing the configured relay"""
    return AutomationRelay(settings.automation_relay_url, settings.automation_relay_timeout)
