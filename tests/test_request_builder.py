import itertools
import pytest
from pearch_gateway.errors import SearchValidationError
from pearch_gateway.services.request_builder import (
    build_search_body,
    build_search_request,
    build_poll_config,
)

FLAGS = ["insights", "high_freshness", "show_emails", "show_phone_numbers", "profile_scoring"]


class TestBuildSearchBody:
    """Test the submit body assembled from raw parameters"""

    def test_minimal_body(self):
        """Test query-only parameters produce defaults for limit and every flag"""
        body = build_search_body({"query": "python developers in berlin"})

        assert body == {
            "query": "python developers in berlin",
            "limit": 50,
            "insights": False,
            "high_freshness": False,
            "show_emails": False,
            "show_phone_numbers": False,
            "profile_scoring": False,
        }
        assert "type" not in body

    @pytest.mark.parametrize("values", list(itertools.product([True, False], repeat=len(FLAGS))))
    def test_flags_always_sent(self, values):
        """Test every boolean flag reaches the body with its given value"""
        parameters = {"query": "cto", "limit": 5, **dict(zip(FLAGS, values))}

        body = build_search_body(parameters)

        assert body["query"] == "cto"
        assert body["limit"] == 5
        for flag, value in zip(FLAGS, values):
            assert body[flag] is value

    def test_camel_case_parameters(self):
        """Test the camelCase parameter names are accepted"""
        body = build_search_body({
            "query": "designers",
            "highFreshness": True,
            "showEmails": True,
            "showPhoneNumbers": True,
            "profileScoring": True,
        })

        assert body["high_freshness"] is True
        assert body["show_emails"] is True
        assert body["show_phone_numbers"] is True
        assert body["profile_scoring"] is True

    def test_type_included_when_set(self):
        """Test search type is sent when provided"""
        assert build_search_body({"query": "q", "type": "pro"})["type"] == "pro"
        assert build_search_body({"query": "q", "type": " fast "})["type"] == "fast"

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_type_omitted(self, blank):
        """Test an empty search type is left out of the body"""
        assert "type" not in build_search_body({"query": "q", "type": blank})

    def test_unknown_type_rejected(self):
        """Test search types outside fast/pro fail validation"""
        with pytest.raises(SearchValidationError, match="type"):
            build_search_body({"query": "q", "type": "turbo"})

    @pytest.mark.parametrize("query", ["", "   ", "\t\n", None])
    def test_empty_query_rejected(self, query):
        """Test empty or whitespace-only query fails"""
        with pytest.raises(SearchValidationError, match="Query parameter is required"):
            build_search_body({"query": query})

    def test_missing_query_rejected(self):
        """Test missing query fails"""
        with pytest.raises(SearchValidationError):
            build_search_body({"limit": 10})

    @pytest.mark.parametrize("limit", [0, -5])
    def test_limit_below_one_rejected(self, limit):
        """Test limit must be at least 1"""
        with pytest.raises(SearchValidationError, match="limit"):
            build_search_body({"query": "q", "limit": limit})

    def test_query_not_trimmed(self):
        """Test query is forwarded as given"""
        request = build_search_request({"query": "  data engineers  "})
        assert request.query == "  data engineers  "


class TestBuildPollConfig:
    """Test polling configuration parsing"""

    def test_defaults(self):
        poll = build_poll_config({})

        assert poll.max_wait_seconds == 600
        assert poll.interval_seconds == 15

    def test_ui_names(self):
        """Test maxWaitTime / pollingInterval names"""
        poll = build_poll_config({"maxWaitTime": 120, "pollingInterval": 5})

        assert poll.max_wait_seconds == 120
        assert poll.interval_seconds == 5

    def test_snake_case_names(self):
        poll = build_poll_config({"max_wait_seconds": 30, "interval_seconds": 3})

        assert poll.max_wait_seconds == 30
        assert poll.interval_seconds == 3

    @pytest.mark.parametrize("parameters", [
        {"maxWaitTime": 9},
        {"maxWaitTime": 3601},
        {"pollingInterval": 1},
        {"pollingInterval": 61},
    ])
    def test_out_of_range_rejected(self, parameters):
        """Test wait time and interval bounds are enforced"""
        with pytest.raises(SearchValidationError, match="Invalid polling parameters"):
            build_poll_config(parameters)
