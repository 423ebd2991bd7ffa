from app.schemas.common import CamelModel, Money


class DashboardStatsOut(CamelModel):
    total_orders: int
    pending_orders: int
    total_sales: Money
    total_invoices: int
    unpaid_invoices: int


class SalesReportPoint(CamelModel):
    date: str
    sales: Money


