"""Tests for request_utils helper functions."""

from unittest.mock import MagicMock

from helpers.request_utils import get_auth_identifier, get_client_ip


class TestGetClientIp:
    """Test cases for get_client_ip function."""

    def test_x_forwarded_for_multiple(self):
        """First X-Forwarded-For entry is the original client."""
        request = MagicMock()
        request.headers = {
            "X-Forwarded-For": "203.0.113.50, 70.41.3.18, 150.172.238.178"
        }
        request.client = MagicMock(host="10.0.0.1")

        assert get_client_ip(request) == "203.0.113.50"

    def test_x_forwarded_for_wins_over_real_ip(self):
        """X-Forwarded-For takes precedence over X-Real-IP."""
        request = MagicMock()
        request.headers = {"X-Forwarded-For": "172.16.0.50", "X-Real-IP": "1.2.3.4"}
        request.client = MagicMock(host="10.0.0.1")

        assert get_client_ip(request) == "172.16.0.50"

    def test_x_real_ip_header(self):
        """Test extraction from X-Real-IP header (nginx)."""
        request = MagicMock()
        request.headers = {"X-Real-IP": " 192.168.1.100 "}
        request.client = MagicMock(host="10.0.0.1")

        assert get_client_ip(request) == "192.168.1.100"

    def test_direct_connection(self):
        """Test extraction from direct connection."""
        request = MagicMock()
        request.headers = {}
        request.client = MagicMock(host="192.168.1.1")

        assert get_client_ip(request) == "192.168.1.1"

    def test_no_client(self):
        """Test handling when client is None."""
        request = MagicMock()
        request.headers = {}
        request.client = None

        assert get_client_ip(request) is None


class TestGetAuthIdentifier:
    """Test cases for get_auth_identifier function."""

    def test_email_normalized(self):
        """E-mail is lowercased and stripped."""
        request = MagicMock()
        request.headers = {}
        request.client = MagicMock(host="10.0.0.1")

        assert get_auth_identifier(request, "  Bob@Example.COM ") == "bob@example.com"

    def test_falls_back_to_ip(self):
        request = MagicMock()
        request.headers = {"X-Real-IP": "198.51.100.7"}
        request.client = None

        assert get_auth_identifier(request) == "198.51.100.7"

    def test_unknown_when_nothing_available(self):
        request = MagicMock()
        request.headers = {}
        request.client = None

        assert get_auth_identifier(request, "   ") == "unknown"
