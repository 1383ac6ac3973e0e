"""
Report endpoints. Owner tier; dates are ISO (YYYY-MM-DD), end date inclusive.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pos_api.routers._common import get_permission_context
from pos_api.services.domain import ReportService
from pos_api.services.permissions import PermissionContext
from pos_shared.infrastructure.db import get_db
from pos_shared.utils.schemas import ItemFrequencyReport, OrderStatisticsReport, RevenueReport

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/items", response_model=ItemFrequencyReport)
def item_frequency(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> ItemFrequencyReport:
    return ReportService(db).item_frequency(ctx, start_date, end_date)


@router.get("/revenue", response_model=RevenueReport)
def revenue(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> RevenueReport:
    return ReportService(db).revenue(ctx, start_date, end_date)


@router.get("/orders", response_model=OrderStatisticsReport)
def order_statistics(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> OrderStatisticsReport:
    return ReportService(db).order_statistics(ctx, start_date, end_date)
