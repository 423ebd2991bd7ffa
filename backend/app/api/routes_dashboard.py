from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.dashboard_schema import DashboardStatsOut, SalesReportPoint
from app.services.dashboard_service import DashboardService

router = APIRouter(tags=["dashboard"])


@router.get("/stats", summary="Order and invoice totals")
def stats(db: Session = Depends(get_db)):
    svc = DashboardService(db)
    return DashboardStatsOut(**svc.stats()).model_dump(mode="json", by_alias=True)


@router.get("/sales-report", summary="Delivered sales per day")
def sales_report(days: int = Query(30, ge=1, le=365), db: Session = Depends(get_db)):
    svc = DashboardService(db)
    return [
        SalesReportPoint(**row).model_dump(mode="json", by_alias=True)
        for row in svc.sales_report(days=days)
    ]
