"""Admin Report Routes: token-gated reporting.

Invariants:
    - Missing or wrong X-Admin-Token → 403 AccessDenied (via ErrorDispatchMiddleware)
"""

from fastapi import APIRouter, Depends, Header, Request

from errorgate.services.admin_reports import AdminReportService

router = APIRouter(prefix="/admin/reports", tags=["admin"])


def get_admin_reports(request: Request) -> AdminReportService:
    return request.app.state.admin_reports


@router.get("")
async def get_report_summary(
    x_admin_token: str | None = Header(None),
    reports: AdminReportService = Depends(get_admin_reports),
):
    """Summary report for administrators."""
    return reports.summary(x_admin_token)
