# backend/services/prompts.py
"""Render aggregates into short text blocks used as grounding for the AI gateway.

Every list is capped at MAX_PROMPT_ENTRIES so prompts stay bounded however
much data the store holds.
"""
from typing import Dict, List

from schemas.analytics import (
    SalesSummary, ExpenseSummary, TaskSummary, ProductSummary, DashboardSummary,
)
from services.analytics import top_entries

MAX_PROMPT_ENTRIES = 5


def money(value: float) -> str:
    return f"${value:,.2f} USD"


def _bullets(lines: List[str]) -> str:
    if not lines:
        return "- none"
    return "\n".join(f"- {line}" for line in lines[:MAX_PROMPT_ENTRIES])


def _counts(mapping: Dict[str, int]) -> List[str]:
    ordered = sorted(mapping.items(), key=lambda item: item[1], reverse=True)
    return [f"{name}: {count}" for name, count in ordered]


# === Data blocks ===

def sales_block(data: SalesSummary) -> str:
    top = [
        f"{name}: {entry.quantity} units, {money(entry.revenue)}"
        for name, entry in top_entries(data.product_breakdown, "revenue", MAX_PROMPT_ENTRIES)
    ]
    return (
        f"Sales Data (Last {data.days} days):\n"
        f"- Total Sales: {data.total_sales} transactions\n"
        f"- Total Revenue: {money(data.total_revenue)}\n"
        f"- Total Quantity Sold: {data.total_quantity} units\n"
        f"\nTop Products:\n{_bullets(top)}"
    )


def expenses_block(data: ExpenseSummary) -> str:
    by_type = [
        f"{name}: {entry.count} items, {money(entry.total)}"
        for name, entry in top_entries(data.breakdown, "total", MAX_PROMPT_ENTRIES)
    ]
    return (
        f"Expense Data (Last {data.days} days):\n"
        f"- Total Expenses: {money(data.total_expenses)}\n"
        f"- Number of Expenses: {data.expense_count}\n"
        f"\nBreakdown by Type:\n{_bullets(by_type)}"
    )


def tasks_block(data: TaskSummary) -> str:
    return (
        "Task Statistics:\n"
        f"- Total Tasks: {data.total_tasks}\n"
        f"- Completion Rate: {data.completion_rate}\n"
        f"\nStatus Breakdown:\n{_bullets(_counts(data.status_breakdown))}\n"
        f"\nPriority Breakdown:\n{_bullets(_counts(data.priority_breakdown))}"
    )


def products_block(data: ProductSummary) -> str:
    ranked = sorted(data.products, key=lambda p: p.revenue, reverse=True)
    performers = [
        f"{p.name}: {p.total_sold} sold, {money(p.revenue)} revenue, {p.profit_margin} margin"
        for p in ranked[:MAX_PROMPT_ENTRIES]
    ]
    profits = [
        f"{p.name}: Cost {money(p.cost)}, Price {money(p.selling_price)}, Profit {money(p.profit)}"
        for p in data.products[:MAX_PROMPT_ENTRIES]
    ]
    return (
        f"Product Inventory ({data.total_products} products):\n"
        f"\nTop Performers:\n{_bullets(performers)}\n"
        f"\nProfit Analysis:\n{_bullets(profits)}"
    )


def dashboard_block(data: DashboardSummary) -> str:
    s = data.summary
    return (
        "Business Overview:\n"
        "\nFinancial Summary:\n"
        f"- Revenue ({data.sales.days} days): {money(s.revenue)}\n"
        f"- Expenses ({data.expenses.days} days): {money(s.expenses)}\n"
        f"- Net Profit: {money(s.net_profit)}\n"
        f"- Profit Margin: {s.profit_margin}\n"
        f"\nSales: {data.sales.total_sales} transactions\n"
        f"Products: {data.products.total_products} items\n"
        f"Tasks: {data.tasks.total_tasks} ({data.tasks.completion_rate} complete)"
    )


# === Prompts ===

def sales_prompt(data: SalesSummary) -> str:
    return (
        "Analyze this sales data and provide insights in English:\n\n"
        f"{sales_block(data)}\n\n"
        "Please provide:\n"
        "1. Key trends and patterns\n"
        "2. Best performing products\n"
        "3. Revenue insights\n"
        "4. Recommendations for improvement"
    )


def expenses_prompt(data: ExpenseSummary) -> str:
    return (
        "Analyze these expense records and provide insights in English:\n\n"
        f"{expenses_block(data)}\n\n"
        "Please provide:\n"
        "1. Main expense categories\n"
        "2. Cost-saving opportunities\n"
        "3. Budget recommendations\n"
        "4. Spending patterns"
    )


def tasks_prompt(data: TaskSummary) -> str:
    return (
        "Analyze these task records and provide productivity insights in English:\n\n"
        f"{tasks_block(data)}\n\n"
        "Please provide:\n"
        "1. Completion rates\n"
        "2. Bottlenecks\n"
        "3. Team performance insights\n"
        "4. Productivity recommendations"
    )


def products_prompt(data: ProductSummary) -> str:
    return (
        "Based on this product data, provide strategic recommendations in English:\n\n"
        f"{products_block(data)}\n\n"
        "Please provide:\n"
        "1. Product performance analysis\n"
        "2. Pricing strategy suggestions\n"
        "3. Inventory optimization ideas\n"
        "4. Market opportunities"
    )


def dashboard_prompt(data: DashboardSummary) -> str:
    return f"Analyze this business data and provide strategic insights:\n\n{dashboard_block(data)}"
