"""Tests for devpilot.services.error_analysis: ordered substring classifier."""

import pytest

from devpilot.services.error_analysis import classify


class TestClassify:

    def test_connection_refused(self):
        result = classify("ECONNREFUSED: connect failed")
        assert result.type == "connection_error"
        assert result.severity == "high"
        assert len(result.suggestions) == 3

    def test_not_found(self):
        result = classify("404 Not Found")
        assert result.type == "not_found"
        assert result.severity == "medium"
        assert len(result.suggestions) == 2

    def test_server_error(self):
        result = classify("500 Internal Server Error")
        assert result.type == "server_error"
        assert result.severity == "critical"
        assert len(result.suggestions) == 3

    @pytest.mark.parametrize("message", ["401 Unauthorized", "HTTP 403 forbidden"])
    def test_auth_error(self, message):
        result = classify(message)
        assert result.type == "auth_error"
        assert result.severity == "high"

    def test_syntax_error(self):
        result = classify("SyntaxError: unexpected token")
        assert result.type == "syntax_error"
        assert result.severity == "medium"
        assert len(result.suggestions) == 3

    def test_unknown(self):
        result = classify("nonsense xyz")
        assert result.type == "unknown"
        assert result.severity == "medium"
        assert result.suggestions == []

    def test_first_rule_wins(self):
        # Matches both "connection" and "500"; connection is checked first
        assert classify("connection reset while returning 500").type == "connection_error"
        # Matches both "404" and "Parse"; not_found is checked before syntax
        assert classify("Parse failed on 404 page").type == "not_found"

    def test_matching_is_case_sensitive(self):
        assert classify("not found").type == "unknown"

    def test_suggestions_are_fresh_lists(self):
        first = classify("404")
        first.suggestions.append("mutated")
        assert "mutated" not in classify("404").suggestions
