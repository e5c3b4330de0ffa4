# backend/utils/ai_gateway.py
import httpx
import logging
from dataclasses import dataclass
from typing import Optional

from config import settings
from utils.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResult:
    """Outcome of one gateway call: either a reply or an UpstreamUnavailable."""
    reply: Optional[str] = None
    error: Optional[UpstreamUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, reply: str) -> "GatewayResult":
        return cls(reply=reply)

    @classmethod
    def failure(cls, reason: str) -> "GatewayResult":
        return cls(error=UpstreamUnavailable(reason))


class AIGatewayClient:
    def __init__(self, url: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.url = url or settings.AI_GATEWAY_URL
        self.timeout = timeout if timeout is not None else settings.AI_GATEWAY_TIMEOUT
        # Injected in tests (httpx.MockTransport)
        self.transport = transport

    async def ask(self, prompt: str) -> GatewayResult:
        # Single POST {"prompt": ...} -> {"reply": ...}; no retries
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.url, json={"prompt": prompt})
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                logger.error(f"AI gateway timeout after {self.timeout}s: {e!r}")
                return GatewayResult.failure("timeout")
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.error(f"AI gateway error: {e}")
                return GatewayResult.failure("transport")
            except ValueError as e:
                logger.error(f"AI gateway returned invalid JSON: {e}")
                return GatewayResult.failure("format")

        reply = data.get("reply") if isinstance(data, dict) else None
        if not isinstance(reply, str) or not reply:
            logger.error("No reply field in AI gateway response")
            return GatewayResult.failure("format")
        return GatewayResult.success(reply)


ai_gateway = AIGatewayClient()

def get_ai_gateway() -> AIGatewayClient:
    return ai_gateway
