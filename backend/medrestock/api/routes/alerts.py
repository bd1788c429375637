"""Front page: low-stock and expiry alerts with summary counts."""
from fastapi import APIRouter, Depends

from medrestock.agent.restock_workflow import RestockWorkflow
from medrestock.api.deps import action_response, get_workflow

router = APIRouter()


@router.get("")
async def list_alerts(workflow: RestockWorkflow = Depends(get_workflow)):
    """Alerts built from the low-stock and expiring lists, fetched together."""
    result = await workflow.refresh_alerts()
    if not result.success:
        return action_response(result)
    return {
        "alerts": [a.model_dump(mode="json") for a in workflow.alerts],
        "summary": workflow.summary.model_dump(),
    }
