"""Property-based tests using Hypothesis.

Tests invariants of property search construction over every combination of
criteria: placeholder numbering, WHERE/AND structure, and price conversion.
"""

import re

from hypothesis import given
from hypothesis import strategies as st

from lightbnb.db.pool import to_sqlite_placeholders
from lightbnb.db.query_builder import build_property_search
from lightbnb.models import MAX_PRICE_PER_NIGHT, SearchCriteria

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

cities = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=30
).filter(lambda s: s.strip() != "")
prices = st.integers(min_value=0, max_value=MAX_PRICE_PER_NIGHT)
ratings = st.floats(min_value=0, max_value=5, allow_nan=False, allow_infinity=False)
limits = st.integers(min_value=1, max_value=1000)

criteria = st.builds(
    SearchCriteria,
    city=st.none() | cities,
    owner_id=st.none() | st.integers(min_value=1, max_value=10_000),
    minimum_price_per_night=st.none() | prices,
    maximum_price_per_night=st.none() | prices,
    minimum_rating=st.none() | ratings,
)


def _present(c: SearchCriteria) -> int:
    return sum(value is not None for value in c.model_dump().values())


# ---------------------------------------------------------------------------
# build_property_search
# ---------------------------------------------------------------------------


class TestPropertySearchInvariants:
    @given(criteria, limits)
    def test_placeholders_number_args_in_order(self, c: SearchCriteria, limit: int) -> None:
        """The Nth placeholder in the text is $N and there is one per argument."""
        plan = build_property_search(c, limit)
        numbers = [int(n) for n in re.findall(r"\$(\d+)", plan.sql)]
        assert numbers == list(range(1, len(plan.args) + 1))

    @given(criteria, limits)
    def test_limit_is_last_argument(self, c: SearchCriteria, limit: int) -> None:
        plan = build_property_search(c, limit)
        assert plan.args[-1] == limit
        assert f"LIMIT ${len(plan.args)};" in plan.sql

    @given(criteria, limits)
    def test_one_argument_per_present_criterion(self, c: SearchCriteria, limit: int) -> None:
        plan = build_property_search(c, limit)
        assert len(plan.args) == _present(c) + 1

    @given(criteria)
    def test_single_where_and_one_and_per_extra_criterion(self, c: SearchCriteria) -> None:
        plan = build_property_search(c)
        present = _present(c)
        assert len(re.findall(r"\bWHERE\b", plan.sql)) == (1 if present else 0)
        assert len(re.findall(r"\bAND\b", plan.sql)) == max(present - 1, 0)

    @given(criteria)
    def test_where_precedes_every_and(self, c: SearchCriteria) -> None:
        plan = build_property_search(c)
        if " AND " in plan.sql or "\nAND " in plan.sql:
            assert plan.sql.index("WHERE") < plan.sql.index("AND")

    @given(prices)
    def test_minimum_price_pushed_in_cents(self, price: int) -> None:
        plan = build_property_search(SearchCriteria(minimum_price_per_night=price))
        assert plan.args[0] == price * 100

    @given(prices)
    def test_maximum_price_pushed_in_cents(self, price: int) -> None:
        plan = build_property_search(SearchCriteria(maximum_price_per_night=price))
        assert plan.args[0] == price * 100

    @given(criteria, limits)
    def test_deterministic(self, c: SearchCriteria, limit: int) -> None:
        assert build_property_search(c, limit) == build_property_search(c, limit)


class TestSqlitePlaceholderRewrite:
    @given(criteria, limits)
    def test_rewrite_keeps_numbering(self, c: SearchCriteria, limit: int) -> None:
        plan = build_property_search(c, limit)
        rewritten = to_sqlite_placeholders(plan.sql)
        assert "$" not in rewritten
        numbers = [int(n) for n in re.findall(r"\?(\d+)", rewritten)]
        assert numbers == list(range(1, len(plan.args) + 1))
