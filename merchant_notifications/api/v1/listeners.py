"""Start and stop the order listener of a branch."""

from fastapi import APIRouter, Depends

from merchant_notifications.api.deps import get_order_listener, get_scope
from merchant_notifications.models import BranchScope
from merchant_notifications.services import OrderChangeListener

router = APIRouter(
    prefix="/merchants/{merchant_id}/branches/{branch_id}/listener",
    tags=["Order Listener"],
)


@router.get("")
async def listener_status(
    scope: BranchScope = Depends(get_scope),
    listener: OrderChangeListener = Depends(get_order_listener),
):
    return {"scope": str(scope), "running": listener.is_running(scope)}


@router.post("")
async def start_listener(
    scope: BranchScope = Depends(get_scope),
    listener: OrderChangeListener = Depends(get_order_listener),
):
    started = await listener.start(scope)
    return {"scope": str(scope), "running": True, "started": started}


@router.delete("")
async def stop_listener(
    scope: BranchScope = Depends(get_scope),
    listener: OrderChangeListener = Depends(get_order_listener),
):
    stopped = await listener.stop(scope)
    return {"scope": str(scope), "running": False, "stopped": stopped}
