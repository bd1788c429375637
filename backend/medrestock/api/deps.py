"""FastAPI dependencies."""
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from medrestock.agent.restock_workflow import RestockWorkflow
from medrestock.schemas.inventory import ActionResult

# Failed ActionResult kinds -> HTTP status
ERROR_STATUS = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "remote": status.HTTP_502_BAD_GATEWAY,
    "transport": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_workflow(request: Request) -> RestockWorkflow:
    """The workflow owned by the running app (created in the lifespan)."""
    workflow = getattr(request.app.state, "workflow", None)
    if workflow is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Restocking workflow not active",
        )
    return workflow


def action_response(result: ActionResult) -> JSONResponse:
    """Render an ActionResult with a status code matching its outcome."""
    if result.success:
        code = status.HTTP_200_OK
    else:
        code = ERROR_STATUS.get(result.error_kind, status.HTTP_503_SERVICE_UNAVAILABLE)
    return JSONResponse(status_code=code, content=result.model_dump(mode="json"))
