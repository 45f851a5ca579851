from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from subs_app.core.exceptions import StoreError, ValidationError
from subs_app.schemas.subscription import SubscriptionCreate, SubscriptionSummaryFilter
from subs_app.services.subscription_store import SqlSubscriptionRepository
from subs_app.services.summary import SummaryAggregator, summary_conditions

USER = "987e6543-e21b-12d3-a456-426614174999"
OTHER_USER = "123e4567-e89b-12d3-a456-426614174000"


async def seed(db, *rows):
    repo = SqlSubscriptionRepository(db)
    for service_name, price, start, end, user in rows:
        await repo.create(
            SubscriptionCreate(
                service_name=service_name,
                price=price,
                user_id=user,
                start_date=start,
                end_date=end,
            )
        )


def window(start="01-2024", end="12-2024", **kwargs) -> SubscriptionSummaryFilter:
    return SubscriptionSummaryFilter(from_=start, to=end, **kwargs)


def test_conditions_only_include_given_filters():
    names = [c.name for c in summary_conditions(date(2024, 1, 1), date(2024, 12, 1))]
    assert names == ["starts_before_range_end", "ends_after_range_start"]

    names = [
        c.name
        for c in summary_conditions(date(2024, 1, 1), date(2024, 12, 1), user_id=USER, service_name="net")
    ]
    assert names == ["starts_before_range_end", "ends_after_range_start", "user", "service_name"]


@pytest.mark.asyncio
async def test_sum_counts_subscriptions_overlapping_range(db):
    await seed(
        db,
        ("A", 100, "01-2024", "06-2024", USER),
        ("B", 200, "07-2024", None, USER),
        ("C", 50, "01-2023", "06-2023", USER),
    )
    assert await SummaryAggregator(db).sum_prices(window()) == 300


@pytest.mark.asyncio
async def test_sum_range_edges_are_inclusive(db):
    await seed(
        db,
        ("ends-on-from", 10, "01-2023", "01-2024", USER),
        ("starts-on-to", 20, "12-2024", None, USER),
        ("starts-after", 40, "01-2025", None, USER),
    )
    assert await SummaryAggregator(db).sum_prices(window()) == 30


@pytest.mark.asyncio
async def test_sum_filters_by_user(db):
    await seed(
        db,
        ("Netflix", 100, "01-2024", None, USER),
        ("Netflix", 500, "01-2024", None, OTHER_USER),
    )
    assert await SummaryAggregator(db).sum_prices(window(user_id=USER)) == 100


@pytest.mark.asyncio
async def test_sum_service_name_is_case_insensitive_substring(db):
    await seed(
        db,
        ("Netflix", 100, "01-2024", None, USER),
        ("Spotify", 300, "01-2024", None, USER),
    )
    aggregator = SummaryAggregator(db)
    assert await aggregator.sum_prices(window(service_name="net")) == 100
    assert await aggregator.sum_prices(window(service_name="FLIX")) == 100


@pytest.mark.asyncio
async def test_sum_service_name_wildcards_match_literally(db):
    await seed(db, ("Netflix", 100, "01-2024", None, USER))
    assert await SummaryAggregator(db).sum_prices(window(service_name="n_t")) == 0
    assert await SummaryAggregator(db).sum_prices(window(service_name="%")) == 0


@pytest.mark.asyncio
async def test_sum_without_matches_is_zero(db):
    await seed(db, ("Netflix", 100, "01-2020", "12-2020", USER))
    assert await SummaryAggregator(db).sum_prices(window()) == 0
    assert await SummaryAggregator(db).sum_prices(window(user_id="nobody")) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("start,end", [("13-2024", "12-2024"), ("01-2024", "2024-12")])
async def test_sum_rejects_invalid_months(db, start, end):
    with pytest.raises(ValidationError):
        await SummaryAggregator(db).sum_prices(window(start, end))


@pytest.mark.asyncio
async def test_sum_database_failure_rolls_back_and_raises_store_error(db, monkeypatch):
    rollbacks = []
    rollback = db.rollback

    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    def tracking_rollback():
        rollbacks.append(True)
        rollback()

    monkeypatch.setattr(db, "execute", broken_execute)
    monkeypatch.setattr(db, "rollback", tracking_rollback)

    with pytest.raises(StoreError) as excinfo:
        await SummaryAggregator(db).sum_prices(window())
    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert rollbacks == [True]
