# backend/services/batch_report.py
from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from models.batch import Batch, BatchProduct
from models.sale import Sale
from services.analytics import group_sales, percent_of, UNKNOWN_PRODUCT, UNKNOWN_LOCATION
from schemas.batch import (
    BatchReport, BatchInfo, BatchCosts, BatchRevenue, BatchProfitability,
    BatchBreakdown, BatchLineOut, BatchExpenseOut,
)
from utils.errors import NotFoundError


def unit_cost(cost: float, quantity: int) -> Optional[float]:
    """Cost per unit of a batch line; undefined (None) for a line without quantity."""
    if not quantity or quantity <= 0:
        return None
    return cost / quantity


def summarize_batch(batch) -> BatchReport:
    """Profit/margin report for a batch with its lines, expenses and sales loaded."""
    product_costs = sum(line.cost for line in batch.products)
    total_expenses = sum(expense.amount for expense in batch.expenses)
    total_cost = product_costs + total_expenses

    total_revenue = sum(sale.total_price for sale in batch.sales)
    total_quantity_sold = sum(sale.quantity for sale in batch.sales)

    profit = total_revenue - total_cost

    lines = [
        BatchLineOut(
            name=line.product.name if line.product else UNKNOWN_PRODUCT,
            quantity=line.quantity,
            cost=line.cost,
            unit_cost=unit_cost(line.cost, line.quantity),
        )
        for line in batch.products
    ]
    expenses = [
        BatchExpenseOut(type=e.type, amount=e.amount, date=e.date, notes=e.notes)
        for e in batch.expenses
    ]

    return BatchReport(
        batch=BatchInfo(
            id=batch.id,
            name=batch.name,
            status=batch.status,
            start_date=batch.start_date,
            end_date=batch.end_date,
        ),
        costs=BatchCosts(product_costs=product_costs, expenses=total_expenses, total_cost=total_cost),
        revenue=BatchRevenue(
            total_revenue=total_revenue,
            total_quantity_sold=total_quantity_sold,
            sales_count=len(batch.sales),
        ),
        profitability=BatchProfitability(profit=profit, profit_margin=percent_of(profit, total_revenue)),
        breakdown=BatchBreakdown(
            products=lines,
            expenses=expenses,
            sales_by_product=group_sales(
                batch.sales, lambda s: s.product.name if s.product else UNKNOWN_PRODUCT),
            sales_by_location=group_sales(
                batch.sales, lambda s: s.location.name if s.location else UNKNOWN_LOCATION),
        ),
    )


def build_batch_report(db: Session, batch_id: int) -> BatchReport:
    batch = (
        db.query(Batch)
        .options(
            selectinload(Batch.products).joinedload(BatchProduct.product),
            selectinload(Batch.expenses),
            selectinload(Batch.sales).joinedload(Sale.product),
            selectinload(Batch.sales).joinedload(Sale.location),
        )
        .filter(Batch.id == batch_id)
        .first()
    )
    if not batch:
        raise NotFoundError("Batch not found")
    return summarize_batch(batch)
