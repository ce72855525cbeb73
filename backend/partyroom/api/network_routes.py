"""
Network status route
"""

from fastapi import APIRouter, Depends
from partyroom.services.network_service import NetworkService, NetworkStatus
from partyroom.api.session_routes import get_network_service

router = APIRouter()

@router.get("/status", response_model=NetworkStatus)
async def network_status(network: NetworkService = Depends(get_network_service)):
    """Latency to the outside world, graded good/fair/poor"""
    return await network.probe()
