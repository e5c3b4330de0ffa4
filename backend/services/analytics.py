# backend/services/analytics.py
"""Live business aggregates read from the record store.

Each ``get_*`` function runs the windowed query and hands the rows to a pure
``fold_*`` function, so the arithmetic can be exercised without a database.
"""
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from models.batch import Batch
from models.expense import Expense
from models.product import Product
from models.sale import Sale, SalesLocation
from models.task import Task
from services.intent import DEFAULT_DAYS
from schemas.analytics import (
    BreakdownEntry, ExpenseTypeEntry,
    SaleLine, SalesSummary, ExpenseLine, ExpenseSummary,
    TaskLine, TaskSummary, ProductPerformance, ProductSummary,
    FinancialSummary, DashboardSummary,
    DashboardStats, DashboardAnalytics, AnalyticsOverview,
    TopProduct, TopLocation, RecentSale, BatchPerformance,
)

RECENT_LIMIT = 10
TOP_LIMIT = 5
# Product performance only looks at each product's most recent sales
PRODUCT_SALES_WINDOW = 50

UNKNOWN_PRODUCT = "Unknown product"
UNKNOWN_LOCATION = "Unknown location"


def _window_start(days: int) -> datetime:
    return datetime.utcnow() - timedelta(days=days)


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def percent_of(part: float, whole: float) -> float:
    """part/whole*100, or 0 when whole is not positive."""
    return (part / whole) * 100 if whole > 0 else 0.0


def top_entries(mapping: Dict[str, object], key: str = "revenue", limit: int = TOP_LIMIT) -> List[Tuple[str, object]]:
    # sorted() is stable, so ties keep the mapping's order
    return sorted(mapping.items(), key=lambda item: getattr(item[1], key), reverse=True)[:limit]


def _product_name(sale) -> str:
    return sale.product.name if sale.product else UNKNOWN_PRODUCT


def _location_name(sale) -> str:
    return sale.location.name if sale.location else UNKNOWN_LOCATION


def group_sales(sales: Iterable, key_fn) -> Dict[str, BreakdownEntry]:
    groups: Dict[str, BreakdownEntry] = {}
    for sale in sales:
        entry = groups.setdefault(key_fn(sale), BreakdownEntry())
        entry.quantity += sale.quantity
        entry.revenue += sale.total_price
    return groups


# =========================
# SALES
# =========================

def fold_sales(sales: List, days: int = DEFAULT_DAYS) -> SalesSummary:
    """Fold sales (newest first) into a summary."""
    recent = [
        SaleLine(
            id=s.id,
            product=_product_name(s),
            location=_location_name(s),
            quantity=s.quantity,
            unit_price=s.unit_price,
            total_price=s.total_price,
            sale_date=s.sale_date,
        )
        for s in sales[:RECENT_LIMIT]
    ]
    return SalesSummary(
        period=f"Last {days} days",
        days=days,
        total_sales=len(sales),
        total_revenue=sum(s.total_price for s in sales),
        total_quantity=sum(s.quantity for s in sales),
        product_breakdown=group_sales(sales, _product_name),
        recent_sales=recent,
    )


def get_sales_data(db: Session, days: int = DEFAULT_DAYS) -> SalesSummary:
    sales = (
        db.query(Sale)
        .options(joinedload(Sale.product), joinedload(Sale.location))
        .filter(Sale.created_at >= _window_start(days))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )
    return fold_sales(sales, days)


# =========================
# EXPENSES
# =========================

def fold_expenses(expenses: List, days: int = DEFAULT_DAYS) -> ExpenseSummary:
    breakdown: Dict[str, ExpenseTypeEntry] = {}
    for expense in expenses:
        entry = breakdown.setdefault(expense.type, ExpenseTypeEntry())
        entry.count += 1
        entry.total += expense.amount

    return ExpenseSummary(
        period=f"Last {days} days",
        days=days,
        total_expenses=sum(e.amount for e in expenses),
        expense_count=len(expenses),
        breakdown=breakdown,
        recent_expenses=[ExpenseLine.model_validate(e) for e in expenses[:RECENT_LIMIT]],
    )


def get_expense_data(db: Session, days: int = DEFAULT_DAYS) -> ExpenseSummary:
    expenses = (
        db.query(Expense)
        .filter(Expense.date >= _window_start(days))
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )
    return fold_expenses(expenses, days)


# =========================
# TASKS
# =========================

def fold_tasks(tasks: List) -> TaskSummary:
    completed = sum(1 for t in tasks if t.status == "completed")
    recent = [
        TaskLine(
            id=t.id,
            title=t.title,
            status=t.status,
            priority=t.priority,
            due_date=t.due_date,
            assigned_to=(t.assigned_to.name or t.assigned_to.email) if t.assigned_to else None,
        )
        for t in tasks[:RECENT_LIMIT]
    ]
    return TaskSummary(
        total_tasks=len(tasks),
        completion_rate=format_percent(percent_of(completed, len(tasks))),
        status_breakdown=dict(Counter(t.status for t in tasks)),
        priority_breakdown=dict(Counter(t.priority for t in tasks)),
        recent_tasks=recent,
    )


def get_task_data(db: Session) -> TaskSummary:
    tasks = (
        db.query(Task)
        .options(joinedload(Task.assigned_to))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
    return fold_tasks(tasks)


# =========================
# PRODUCTS
# =========================

def summarize_product(product) -> ProductPerformance:
    recent_sales = sorted(
        product.sales,
        key=lambda s: (s.created_at or datetime.min, s.id or 0),
        reverse=True,
    )[:PRODUCT_SALES_WINDOW]

    profit = product.price - product.cost
    return ProductPerformance(
        name=product.name,
        selling_price=product.price,
        cost=product.cost,
        profit=profit,
        profit_margin=format_percent(profit / product.cost * 100) if product.cost > 0 else "N/A",
        total_sold=sum(s.quantity for s in recent_sales),
        revenue=sum(s.total_price for s in recent_sales),
        component_count=len(product.components),
    )


def get_product_data(db: Session) -> ProductSummary:
    products = (
        db.query(Product)
        .options(selectinload(Product.components), selectinload(Product.sales))
        .order_by(Product.id.asc())
        .all()
    )
    return ProductSummary(
        total_products=len(products),
        products=[summarize_product(p) for p in products],
    )


# =========================
# DASHBOARD
# =========================

def summarize_finances(revenue: float, expenses: float) -> FinancialSummary:
    net_profit = revenue - expenses
    return FinancialSummary(
        revenue=revenue,
        expenses=expenses,
        net_profit=net_profit,
        profit_margin=format_percent(percent_of(net_profit, revenue)),
    )


def get_dashboard_data(db: Session) -> DashboardSummary:
    sales = get_sales_data(db, DEFAULT_DAYS)
    expenses = get_expense_data(db, DEFAULT_DAYS)
    return DashboardSummary(
        sales=sales,
        expenses=expenses,
        tasks=get_task_data(db),
        products=get_product_data(db),
        summary=summarize_finances(sales.total_revenue, expenses.total_expenses),
    )


def get_dashboard_stats(db: Session) -> DashboardStats:
    return DashboardStats(
        products_count=db.query(Product).count(),
        batches_count=db.query(Batch).count(),
        total_expenses=db.query(func.coalesce(func.sum(Expense.amount), 0.0)).scalar() or 0.0,
        active_tasks_count=db.query(Task).filter(Task.status != "completed").count(),
    )


def _batch_cost(batch) -> float:
    return sum(line.cost for line in batch.products) + sum(e.amount for e in batch.expenses)


def get_dashboard_analytics(db: Session) -> DashboardAnalytics:
    """All-time overview: profit, top products/locations, batch performance."""
    sales = (
        db.query(Sale)
        .options(joinedload(Sale.product), joinedload(Sale.location), joinedload(Sale.batch))
        .all()
    )
    batches = (
        db.query(Batch)
        .options(selectinload(Batch.products), selectinload(Batch.expenses), selectinload(Batch.sales))
        .all()
    )
    tasks = db.query(Task).all()

    total_revenue = sum(s.total_price for s in sales)
    total_product_costs = sum(line.cost for b in batches for line in b.products)
    total_expenses = db.query(func.coalesce(func.sum(Expense.amount), 0.0)).scalar() or 0.0
    total_cost = total_product_costs + total_expenses
    total_profit = total_revenue - total_cost

    product_ids = {}
    for s in sales:
        product_ids.setdefault(_product_name(s), s.product_id)
    top_products = [
        TopProduct(name=name, product_id=product_ids.get(name), quantity=entry.quantity, revenue=entry.revenue)
        for name, entry in top_entries(group_sales(sales, _product_name))
    ]

    location_sales: Dict[str, TopLocation] = {}
    for s in sales:
        name = _location_name(s)
        entry = location_sales.setdefault(name, TopLocation(name=name, sales=0, revenue=0.0))
        entry.sales += 1
        entry.revenue += s.total_price
    top_locations = [entry for _, entry in top_entries(location_sales)]

    recent_sales = [
        RecentSale(
            id=s.id,
            date=s.sale_date,
            product=_product_name(s),
            batch=s.batch.name if s.batch else "-",
            location=_location_name(s),
            quantity=s.quantity,
            total=s.total_price,
        )
        for s in sorted(sales, key=lambda s: s.sale_date or datetime.min, reverse=True)[:RECENT_LIMIT]
    ]

    performance = []
    for b in batches:
        revenue = sum(s.total_price for s in b.sales)
        cost = _batch_cost(b)
        performance.append(BatchPerformance(
            id=b.id, name=b.name, status=b.status,
            revenue=revenue, cost=cost, profit=revenue - cost,
            profit_margin=percent_of(revenue - cost, revenue),
        ))
    performance.sort(key=lambda p: p.profit, reverse=True)

    active_tasks = [t for t in tasks if t.status != "completed"]
    by_priority = Counter(t.priority for t in active_tasks)

    overview = AnalyticsOverview(
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_profit=total_profit,
        profit_margin=percent_of(total_profit, total_revenue),
        total_sales=len(sales),
        total_products=db.query(Product).count(),
        total_batches=len(batches),
        active_batches=sum(1 for b in batches if b.status != "completed"),
        total_locations=db.query(SalesLocation).count(),
        active_tasks=len(active_tasks),
    )
    return DashboardAnalytics(
        overview=overview,
        top_products=top_products,
        top_locations=top_locations,
        recent_sales=recent_sales,
        batch_performance=performance[:TOP_LIMIT],
        tasks_by_priority={p: by_priority.get(p, 0) for p in ("high", "medium", "low")},
    )
