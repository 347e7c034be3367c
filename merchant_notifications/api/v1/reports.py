"""Sales report email endpoint used by the analytics dashboard."""

from fastapi import APIRouter, Depends, HTTPException, status

from merchant_notifications.api.deps import get_report_requester, get_scope
from merchant_notifications.models import AnalyticsDashboard, BranchScope, ReportStatus
from merchant_notifications.services import ReportRequester

router = APIRouter(
    prefix="/merchants/{merchant_id}/branches/{branch_id}/reports",
    tags=["Reports"],
)


@router.post("/email")
async def email_sales_report(
    dashboard: AnalyticsDashboard,
    scope: BranchScope = Depends(get_scope),
    requester: ReportRequester = Depends(get_report_requester),
):
    """Email the given dashboard period to the branch's configured address."""
    outcome = await requester.send_report(scope, dashboard)

    if outcome.status == ReportStatus.NOT_CONFIGURED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Please configure your email address in Settings before generating reports.",
        )
    if outcome.status == ReportStatus.FAILED:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=outcome.error or "Failed to send email",
        )

    return {
        "status": outcome.status.value,
        "message": f"Report sent to {outcome.email}",
        "email": outcome.email,
    }
