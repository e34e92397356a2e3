"""
Dashboard API Endpoints

Admin dashboard summary and sales report built from posted rows.
"""

from fastapi import APIRouter
import structlog

from storefront_analytics.reporting.dashboard import build_dashboard, build_sales_report
from storefront_analytics.reporting.timeframes import dashboard_window, report_months, report_window
from storefront_analytics.serving.api.routes.analytics import utc_now
from storefront_analytics.serving.api.schemas import (
    DashboardOut,
    DashboardRequest,
    SalesReportOut,
    SalesReportRequest,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/summary", response_model=DashboardOut)
async def get_dashboard_summary(request: DashboardRequest) -> DashboardOut:
    """
    Dashboard figures for a range selector.

    Revenue and order changes compare against the preceding period of the
    same length.
    """
    window = dashboard_window(request.timeframe, request.now or utc_now())
    logger.info(
        "get_dashboard_summary called",
        timeframe=request.timeframe,
        start=window.start.isoformat(),
        end=window.end.isoformat(),
    )

    summary = build_dashboard(request.orders, request.profiles, request.products, window)
    return DashboardOut.model_validate(summary)


@router.post("/sales-report", response_model=SalesReportOut)
async def get_sales_report(request: SalesReportRequest) -> SalesReportOut:
    """Sales report; unknown range selectors cover the last 30 days."""
    now = request.now or utc_now()
    window = report_window(request.timeframe, now)

    report = build_sales_report(
        request.orders,
        request.profiles,
        request.order_items,
        window,
        months=report_months(request.timeframe),
        now=now,
    )
    logger.info("Sales report built", orders=report.total_orders, timeframe=request.timeframe)
    return SalesReportOut.model_validate(report)
