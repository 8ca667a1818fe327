from lunchbot.forkable.errors import LoginError, LoginErrorKind, QueryError, QueryErrorKind
from lunchbot.models import DeliverySummary, LunchOrder
from lunchbot.utils.formatter import format_lunch_response


def test_format_single_restaurant():
    summary = DeliverySummary(date="2026-10-20", lunch=[LunchOrder(restaurant="Cafe A", items=["Sandwich", "Soup"])])

    assert format_lunch_response(summary) == "Cafe A: Sandwich, Soup"


def test_format_multiple_restaurants_joined_with_period():
    summary = DeliverySummary(
        date="2026-10-20",
        lunch=[
            LunchOrder(restaurant="Cafe A", items=["Sandwich"]),
            LunchOrder(restaurant="Noodle Bar", items=["Ramen", "Gyoza"]),
        ],
    )

    assert format_lunch_response(summary) == "Cafe A: Sandwich. Noodle Bar: Ramen, Gyoza"


def test_format_no_deliveries():
    assert format_lunch_response(DeliverySummary(date="2026-10-20", lunch=[])) == "No lunch ordered"


def test_format_skips_entries_without_items():
    summary = DeliverySummary(
        date="2026-10-20",
        lunch=[LunchOrder(restaurant="Empty", items=[]), LunchOrder(restaurant="Cafe A", items=["Salad"])],
    )

    assert format_lunch_response(summary) == "Cafe A: Salad"


def test_format_only_empty_entries_is_no_lunch():
    summary = DeliverySummary(date="2026-10-20", lunch=[LunchOrder(restaurant="Empty", items=[])])

    assert format_lunch_response(summary) == "No lunch ordered"


def test_format_error_returns_message_unmodified():
    error = QueryError(QueryErrorKind.UNREACHABLE, "Failed to fetch lunch data with status 502", status_code=502)

    assert format_lunch_response(error) == "Failed to fetch lunch data with status 502"


def test_format_login_error_message():
    error = LoginError(LoginErrorKind.REJECTED, "Failed to login: invalid credentials")

    assert format_lunch_response(error) == "Failed to login: invalid credentials"


def test_format_error_without_message_is_unknown_error():
    assert format_lunch_response(QueryError(QueryErrorKind.MALFORMED_RESPONSE, "")) == "Unknown error"
