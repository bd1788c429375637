"""Restocking screen: display sets, filters, restock submission, delivery confirmation."""
from datetime import date
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from medrestock.agent.restock_workflow import RestockWorkflow
from medrestock.api.deps import action_response, get_workflow
from medrestock.schemas.inventory import CATEGORY_OPTIONS, ActionResult, RestockView

router = APIRouter()


# ==============================================================================
# REQUEST BODIES
# ==============================================================================

class CategoryFilterUpdate(BaseModel):
    category: str


class ActiveViewUpdate(BaseModel):
    view: str


class RestockSubmit(BaseModel):
    medication_key: Optional[str] = None
    quantity: Union[str, int] = ""
    next_batch: str = ""
    expected_delivery_date: Optional[Union[date, str]] = None


# ==============================================================================
# READS
# ==============================================================================

@router.get("/views/{view}")
def get_view(view: RestockView, workflow: RestockWorkflow = Depends(get_workflow)):
    """Keyed, category-filtered rows of one display set."""
    return {
        "view": view.value,
        "category": workflow.category_filter,
        "items": [item.model_dump(mode="json") for item in workflow.view(view)],
    }


@router.get("/state")
def get_state(workflow: RestockWorkflow = Depends(get_workflow)):
    return workflow.state()


@router.get("/categories")
def list_categories():
    return CATEGORY_OPTIONS


# ==============================================================================
# ACTIONS
# ==============================================================================

@router.post("/refresh")
async def refresh(workflow: RestockWorkflow = Depends(get_workflow)):
    return action_response(await workflow.refresh("manual"))


@router.post("/focus")
async def focus(workflow: RestockWorkflow = Depends(get_workflow)):
    """Screen became visible again."""
    return action_response(await workflow.on_focus())


@router.put("/filter")
def set_filter(body: CategoryFilterUpdate, workflow: RestockWorkflow = Depends(get_workflow)):
    return action_response(workflow.set_category_filter(body.category))


@router.put("/view")
def set_view(body: ActiveViewUpdate, workflow: RestockWorkflow = Depends(get_workflow)):
    return action_response(workflow.set_active_view(body.view))


@router.post("/forms/{medication_key}")
def open_form(medication_key: str, workflow: RestockWorkflow = Depends(get_workflow)):
    """Open a pre-filled restock form for a needs-restock row."""
    form = workflow.open_restock_form(medication_key)
    if form is None:
        raise HTTPException(status_code=404, detail="Medication not found in the restock list")
    return form.model_dump(mode="json", by_alias=True)


@router.post("")
async def submit_restock(body: RestockSubmit, workflow: RestockWorkflow = Depends(get_workflow)):
    if body.medication_key is not None:
        form = workflow.open_restock_form(body.medication_key)
        if form is None:
            raise HTTPException(status_code=404, detail="Medication not found in the restock list")
    else:
        form = workflow.form
        if form is None:
            return action_response(ActionResult.failure("Please select a medication to restock.", "validation"))

    form.quantity = body.quantity
    form.next_batch = body.next_batch
    if body.expected_delivery_date is not None:
        form.expected_delivery_date = body.expected_delivery_date

    return action_response(await workflow.submit_restock(form))


@router.post("/{order_id}/deliver")
async def confirm_delivery(order_id: str, workflow: RestockWorkflow = Depends(get_workflow)):
    return action_response(await workflow.confirm_delivery(order_id))
