"""
Network quality probe and QR image fetch
"""

import logging
import time
import httpx
from typing import Optional
from pydantic import BaseModel
from partyroom.core.config import settings
from partyroom.core.utils import get_qr_code_url

logger = logging.getLogger(__name__)

class NetworkStatus(BaseModel):
    quality: str  # good, fair, poor
    latency_ms: int

def classify_latency(ms: int) -> str:
    if ms < 100:
        return "good"
    if ms < 300:
        return "fair"
    return "poor"

class NetworkService:
    """Outbound HTTP used by the host screen"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    def _client(self, timeout: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def probe(self, url: Optional[str] = None) -> NetworkStatus:
        """Round-trip one small request and grade the latency"""
        url = url or settings.NETWORK_PROBE_URL
        start = time.monotonic()
        try:
            async with self._client(settings.NETWORK_PROBE_TIMEOUT) as client:
                await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Network probe failed: {e}")
            return NetworkStatus(quality="poor", latency_ms=999)
        ms = int((time.monotonic() - start) * 1000)
        return NetworkStatus(quality=classify_latency(ms), latency_ms=ms)

    async def fetch_qr_image(self, room_code: str) -> tuple:
        """Fetch the join QR code from the image service; returns (bytes, content type)"""
        async with self._client(settings.QR_TIMEOUT) as client:
            response = await client.get(get_qr_code_url(room_code))
            response.raise_for_status()
            return response.content, response.headers.get("content-type", "image/png")
