"""
Unit tests for the request context and sub-request correlation.
"""

from unittest.mock import MagicMock

from service_cache.app.context import RequestContext, next_request_id
from service_cache.app.purge.keys import HashingKeyDeriver


class TestRequestContext:
    """Test cases for RequestContext."""

    def test_request_ids_increase_from_one(self):
        ctx = RequestContext(org="myorg", site="mysite", logger=MagicMock())

        assert [next_request_id(ctx) for _ in range(3)] == [1, 2, 3]

    def test_request_ids_are_per_context(self):
        first = RequestContext(org="myorg", site="mysite", logger=MagicMock())
        second = RequestContext(org="myorg", site="mysite", logger=MagicMock())

        next_request_id(first)
        next_request_id(first)

        assert next_request_id(second) == 1
        assert next_request_id(first) == 3

    def test_site_identity(self):
        ctx = RequestContext(org="myorg", site="mysite", store_code="us", store_view_code="en", logger=MagicMock())

        assert ctx.site_key == "myorg--mysite"
        assert ctx.site_id == "myorg/mysite/us/en"

    def test_defaults(self):
        ctx = RequestContext(org="myorg", site="mysite")

        assert ctx.logger is not None
        assert isinstance(ctx.key_deriver, HashingKeyDeriver)
        assert ctx.helix_config is None
        assert ctx.settings.cloudflare_concurrency == 8
