from decimal import Decimal

from playgroup.core.schemas import CamelModel


class DashboardStats(CamelModel):
    total_students: int
    active_students: int
    monthly_expenses: Decimal
    monthly_fee_collection: Decimal
    total_inventory_items: int
    low_stock_items: int
    pending_fee_total: Decimal
