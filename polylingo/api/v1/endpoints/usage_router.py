from fastapi import APIRouter, Depends

from polylingo.interfaces.usage_gate import IUsageGate
from polylingo.schemas.usage_schemas import UsageStats
from polylingo.services.service_dependencies import get_usage_gate

router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("", response_model=UsageStats)
async def get_usage(usage_gate: IUsageGate = Depends(get_usage_gate)) -> UsageStats:
    """
    Get today's usage of the requesting device.
    :param usage_gate: Daily quota of the requesting device
    :return: Used, limit and remaining units
    """
    return await usage_gate.get_usage_stats()
