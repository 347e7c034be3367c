"""FastAPI dependencies resolving services created in the app lifespan."""

from fastapi import HTTPException, Path, Request, status

from merchant_notifications.models import BranchScope
from merchant_notifications.services import BranchConfigStore, OrderChangeListener, ReportRequester


def get_scope(
    merchant_id: str = Path(..., min_length=1),
    branch_id: str = Path(..., min_length=1),
) -> BranchScope:
    return BranchScope(merchant_id, branch_id)


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} is not initialised",
        )
    return service


def get_config_store(request: Request) -> BranchConfigStore:
    return _service(request, "config_store")


def get_report_requester(request: Request) -> ReportRequester:
    return _service(request, "report_requester")


def get_order_listener(request: Request) -> OrderChangeListener:
    return _service(request, "order_listener")
