# backend/routes/dashboard.py
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import get_current_user
from services import analytics
from schemas.analytics import DashboardStats, DashboardAnalytics, SalesSummary, ExpenseSummary

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"]
)

# === Response envelopes ===

class StatsResponse(BaseModel):
    success: bool = True
    data: DashboardStats

class AnalyticsResponse(BaseModel):
    success: bool = True
    data: DashboardAnalytics

class SalesResponse(BaseModel):
    success: bool = True
    data: SalesSummary

class ExpensesResponse(BaseModel):
    success: bool = True
    data: ExpenseSummary


# === Endpoint 1: Headline counters ===

@router.get("/stats", response_model=StatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return StatsResponse(data=analytics.get_dashboard_stats(db))

# === Endpoint 2: All-time analytics ===

@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return AnalyticsResponse(data=analytics.get_dashboard_analytics(db))

# === Endpoint 3: Windowed summaries (same data the assistant sees) ===

@router.get("/sales-summary", response_model=SalesResponse)
def get_sales_summary(
    days: int = Query(30, ge=1, le=3650),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return SalesResponse(data=analytics.get_sales_data(db, days))

@router.get("/expense-summary", response_model=ExpensesResponse)
def get_expense_summary(
    days: int = Query(30, ge=1, le=3650),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return ExpensesResponse(data=analytics.get_expense_data(db, days))
