import pytest

from services.intent import detect_query_intent, QueryIntent, DEFAULT_DAYS


@pytest.mark.parametrize("message,expected", [
    ("How are my sales doing?", "sales"),
    ("What did we spend on expenses?", "expenses"),
    ("Show me task progress", "tasks"),
    ("Which product sells best?", "products"),
    ("Give me an overview", "dashboard"),
    ("ما هي المبيعات", "sales"),
    ("Hello there", "general"),
])
def test_detects_intent_by_keyword(message, expected):
    assert detect_query_intent(message).type == expected


def test_sales_wins_over_tasks_when_both_match():
    assert detect_query_intent("sales and task status").type == "sales"


def test_cost_keyword_beats_product_keyword():
    # expenses are checked before products
    assert detect_query_intent("What does each product cost?").type == "expenses"


def test_day_window_is_parsed():
    assert detect_query_intent("sales in the last 7 days") == QueryIntent("sales", 7)
    assert detect_query_intent("Expenses for 90day period").days == 90


def test_day_window_defaults_to_thirty():
    intent = detect_query_intent("How are sales?")
    assert intent.days == DEFAULT_DAYS == 30


def test_only_windowed_intents_carry_days():
    assert detect_query_intent("tasks from the last 7 days").days is None
    assert detect_query_intent("dashboard for 7 days").days is None
    assert detect_query_intent("what happened in 7 days?") == QueryIntent("general", None)


def test_case_insensitive_and_empty_message():
    assert detect_query_intent("REVENUE please").type == "sales"
    assert detect_query_intent("").type == "general"
