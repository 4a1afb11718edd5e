"""Unit tests for the admin analytics service."""
from datetime import datetime, timezone

import pytest

from feature_board.services.analytics import AnalyticsService

# forty days after the shared fixtures' base submission time
NOW = datetime(2024, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def analytics(store):
    return AnalyticsService(store, clock=lambda: NOW)


class TestOverview:
    """Test the analytics overview."""

    def test_empty_board(self, analytics):
        """Test an empty board reports zeros and no active category."""
        data = analytics.overview()["data"]

        assert data["totalFeedback"] == 0
        assert data["topVotedItems"] == []
        assert data["recentTrends"] == {
            "recentSubmissions": 0,
            "recentVotes": 0,
            "averageVotesPerItem": 0,
            "mostActiveCategory": "None",
        }

    def test_recent_trends_window(self, analytics, store, item_factory):
        """Test only items from the last 30 days count as recent."""
        store.add_item(item_factory("old", voters=["u1"], days=0))
        store.add_item(item_factory("new-1", voters=["u1", "u2", "u3"], days=20, category="Beep", sub_category=None))
        store.add_item(item_factory("new-2", voters=["u1"], days=30, category="Beep", sub_category=None))

        trends = analytics.overview()["data"]["recentTrends"]

        assert trends["recentSubmissions"] == 2
        assert trends["recentVotes"] == 4
        assert trends["averageVotesPerItem"] == 2
        assert trends["mostActiveCategory"] == "Beep"

    def test_top_voted_limited_to_ten(self, analytics, store, item_factory):
        """Test the top list keeps the ten most voted items in board order."""
        for i in range(12):
            store.add_item(item_factory(f"f{i}", voters=[f"u{v}" for v in range(i)]))

        top = analytics.overview()["data"]["topVotedItems"]

        assert len(top) == 10
        assert top[0]["id"] == "f11"
        assert top[-1]["id"] == "f2"

    def test_tag_frequency(self, analytics, store, item_factory):
        """Test every tag of every tagged item is counted."""
        store.add_item(item_factory("1", tags=["Export", "API"]))
        store.add_item(item_factory("2", tags=["Export"]))
        store.add_item(item_factory("3"))

        frequency = analytics.overview()["data"]["tagFrequency"]

        assert frequency["counts"] == {"Export": 2, "API": 1}
        assert (frequency["totalTaggedItems"], frequency["totalUntaggedItems"]) == (2, 1)


class TestUntagged:
    """Test the untagged backlog."""

    def test_most_voted_first_and_limited(self, analytics, store, item_factory):
        """Test untagged items come most voted first, capped at the limit."""
        store.add_item(item_factory("low", voters=["u1"]))
        store.add_item(item_factory("high", voters=["u1", "u2"]))
        store.add_item(item_factory("tagged", voters=["u1", "u2", "u3"], tags=["Export"]))

        result = analytics.untagged(limit=1)

        assert [row["id"] for row in result["data"]] == ["high"]
        assert result["meta"]["count"] == 1

    def test_nothing_untagged(self, analytics):
        """Test the message when every item is tagged."""
        assert analytics.untagged()["meta"]["message"] == "No untagged feedback found"


class TestExport:
    """Test the JSON export."""

    def test_vote_count_matches_voters(self, analytics, store, item_factory):
        """Test each row reports its voters and count."""
        store.add_item(item_factory("1", voters=["u1", "u2"], status="In Progress"))

        result = analytics.export()

        assert result["data"][0]["voteCount"] == 2
        assert result["data"][0]["votedBy"] == ["u1", "u2"]
        assert result["meta"]["statuses"]["inProgress"] == 1
        assert result["meta"]["totalVotes"] == 2
