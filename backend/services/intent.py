# backend/services/intent.py
import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_DAYS = 30

# "7 days", "30day", "7 أيام"
DAYS_PATTERN = re.compile(r"(\d+)\s*(day|days|يوم|أيام)", re.IGNORECASE)

# Checked in this order; the first domain with a matching keyword wins.
# A question mentioning both sales and tasks is a sales question.
INTENT_KEYWORDS = (
    ("sales", ("sales", "مبيعات", "revenue", "selling")),
    ("expenses", ("expense", "مصروفات", "cost", "spending")),
    ("tasks", ("task", "مهام", "productivity", "project")),
    ("products", ("product", "منتج", "inventory", "stock")),
    ("dashboard", ("dashboard", "overview", "summary", "ملخص")),
)

# Intents whose aggregation is bounded by a day window
WINDOWED_INTENTS = {"sales", "expenses"}


@dataclass(frozen=True)
class QueryIntent:
    type: str
    days: Optional[int] = None


def detect_query_intent(message: str) -> QueryIntent:
    lower_message = (message or "").lower()

    days_match = DAYS_PATTERN.search(lower_message)
    days = int(days_match.group(1)) if days_match else DEFAULT_DAYS

    for intent_type, keywords in INTENT_KEYWORDS:
        if any(keyword in lower_message for keyword in keywords):
            return QueryIntent(intent_type, days if intent_type in WINDOWED_INTENTS else None)

    return QueryIntent("general")
