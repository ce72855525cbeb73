"""
Network probe and QR fetch
"""

import httpx

from partyroom.services.network_service import NetworkService, classify_latency


def test_classify_latency():
    assert classify_latency(50) == "good"
    assert classify_latency(150) == "fair"
    assert classify_latency(300) == "poor"


async def test_probe_reports_latency():
    service = NetworkService(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    status = await service.probe("https://probe.test/favicon.ico")
    assert status.quality == "good"
    assert status.latency_ms < 100


async def test_probe_failure_is_poor():
    def fail(request):
        raise httpx.ConnectError("offline", request=request)

    status = await NetworkService(transport=httpx.MockTransport(fail)).probe("https://probe.test/")
    assert status.quality == "poor"
    assert status.latency_ms == 999


async def test_fetch_qr_image_requests_join_url():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, content=b"png", headers={"content-type": "image/png"})

    content, content_type = await NetworkService(transport=httpx.MockTransport(handler)).fetch_qr_image("AB3X7K")
    assert content == b"png"
    assert content_type == "image/png"
    assert "join%2FAB3X7K" in str(seen[0]) or "join/AB3X7K" in str(seen[0])
