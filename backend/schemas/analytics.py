# schemas/analytics.py
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from schemas.base import ORMBase


# quantity/revenue pair used by every "group sales by X" fold
class BreakdownEntry(BaseModel):
    quantity: int = 0
    revenue: float = 0.0


class ExpenseTypeEntry(BaseModel):
    count: int = 0
    total: float = 0.0


# === Sales ===

class SaleLine(ORMBase):
    id: int
    product: str
    location: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float
    sale_date: Optional[datetime] = None


class SalesSummary(BaseModel):
    period: str
    days: int
    total_sales: int
    total_revenue: float
    total_quantity: int
    product_breakdown: Dict[str, BreakdownEntry]
    recent_sales: List[SaleLine] = []


# === Expenses ===

class ExpenseLine(ORMBase):
    id: int
    type: str
    amount: float
    date: Optional[datetime] = None
    notes: Optional[str] = None


class ExpenseSummary(BaseModel):
    period: str
    days: int
    total_expenses: float
    expense_count: int
    breakdown: Dict[str, ExpenseTypeEntry]
    recent_expenses: List[ExpenseLine] = []


# === Tasks ===

class TaskLine(ORMBase):
    id: int
    title: str
    status: str
    priority: str
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None


class TaskSummary(BaseModel):
    total_tasks: int
    completion_rate: str
    status_breakdown: Dict[str, int]
    priority_breakdown: Dict[str, int]
    recent_tasks: List[TaskLine] = []


# === Products ===

class ProductPerformance(BaseModel):
    name: str
    selling_price: float
    cost: float
    profit: float
    # "12.5%" or "N/A" when the product has no cost
    profit_margin: str
    total_sold: int
    revenue: float
    component_count: int


class ProductSummary(BaseModel):
    total_products: int
    products: List[ProductPerformance]


# === Dashboard ===

class FinancialSummary(BaseModel):
    revenue: float
    expenses: float
    net_profit: float
    profit_margin: str


class DashboardSummary(BaseModel):
    sales: SalesSummary
    expenses: ExpenseSummary
    tasks: TaskSummary
    products: ProductSummary
    summary: FinancialSummary


# === /dashboard endpoints ===

class DashboardStats(BaseModel):
    products_count: int
    batches_count: int
    total_expenses: float
    active_tasks_count: int


class AnalyticsOverview(BaseModel):
    total_revenue: float
    total_cost: float
    total_profit: float
    profit_margin: float
    total_sales: int
    total_products: int
    total_batches: int
    active_batches: int
    total_locations: int
    active_tasks: int


class TopProduct(BaseModel):
    name: str
    product_id: Optional[int] = None
    quantity: int
    revenue: float


class TopLocation(BaseModel):
    name: str
    sales: int
    revenue: float


class RecentSale(BaseModel):
    id: int
    date: Optional[datetime] = None
    product: str
    batch: str
    location: str
    quantity: int
    total: float


class BatchPerformance(BaseModel):
    id: int
    name: str
    status: str
    revenue: float
    cost: float
    profit: float
    profit_margin: float


class DashboardAnalytics(BaseModel):
    overview: AnalyticsOverview
    top_products: List[TopProduct]
    top_locations: List[TopLocation]
    recent_sales: List[RecentSale]
    batch_performance: List[BatchPerformance]
    tasks_by_priority: Dict[str, int]
