# schemas/batch.py
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from schemas.analytics import BreakdownEntry


class BatchInfo(BaseModel):
    id: int
    name: str
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BatchCosts(BaseModel):
    product_costs: float
    expenses: float
    total_cost: float


class BatchRevenue(BaseModel):
    total_revenue: float
    total_quantity_sold: int
    sales_count: int


class BatchProfitability(BaseModel):
    profit: float
    # percent of revenue; 0 when the batch has no revenue
    profit_margin: float


class BatchLineOut(BaseModel):
    name: str
    quantity: int
    cost: float
    # None when the line has no quantity (cost per unit undefined)
    unit_cost: Optional[float] = None


class BatchExpenseOut(BaseModel):
    type: str
    amount: float
    date: Optional[datetime] = None
    notes: Optional[str] = None


class BatchBreakdown(BaseModel):
    products: List[BatchLineOut]
    expenses: List[BatchExpenseOut]
    sales_by_product: Dict[str, BreakdownEntry]
    sales_by_location: Dict[str, BreakdownEntry]


class BatchReport(BaseModel):
    batch: BatchInfo
    costs: BatchCosts
    revenue: BatchRevenue
    profitability: BatchProfitability
    breakdown: BatchBreakdown


class BatchReportResponse(BaseModel):
    success: bool = True
    data: BatchReport
