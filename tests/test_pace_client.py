"""Tests for the elite pace provider client."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from hyrox_programs.analysis.vdot import PaceConfidence
from hyrox_programs.api.pace_client import ElitePaceClient, PaceProviderError

PROJECT_ROOT = Path(__file__).resolve().parents[1]

VALID_PACES = {
    "easy_min": "6:00",
    "easy_max": "5:30",
    "marathon": "4:40",
    "threshold": "4:20",
    "interval": "4:00",
    "repetition": "3:45",
    "confidence": "high",
}


def response(payload=None, json_error=None, http_error=None):
    mock = MagicMock()
    mock.json.return_value = payload
    if json_error is not None:
        mock.json.side_effect = json_error
    if http_error is not None:
        mock.raise_for_status.side_effect = http_error
    return mock


class TestElitePaceClient:
    """Test pace fetching and failure handling."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = ElitePaceClient(base_url="https://paces.example.com/", token="secret", timeout=2)

    def test_session_configuration(self):
        """Test base URL and auth header."""
        assert self.client.base_url == "https://paces.example.com"
        assert self.client.session.headers["Authorization"] == "Bearer secret"
        assert self.client.enabled

    def test_fetch_paces(self):
        """Test a valid response becomes a pace model."""
        with patch.object(self.client.session, "get", return_value=response({"paces": VALID_PACES})) as get:
            model = self.client.fetch_paces("athlete-1")

        get.assert_called_once_with("https://paces.example.com/athletes/athlete-1/paces", timeout=2)
        assert model is not None
        assert model.threshold == 260
        assert model.confidence == PaceConfidence.HIGH
        assert model.source == "elite provider"

    def test_unwrapped_payload(self):
        """Test paces at the top level of the response."""
        with patch.object(self.client.session, "get", return_value=response(VALID_PACES)):
            assert self.client.fetch_paces("athlete-1") is not None

    def test_timeout(self):
        """Test a slow provider means no pace data."""
        with patch.object(self.client.session, "get", side_effect=requests.Timeout("slow")):
            assert self.client.fetch_paces("athlete-1") is None

    def test_http_error(self):
        """Test error responses mean no pace data."""
        error = response(http_error=requests.HTTPError("503"))
        with patch.object(self.client.session, "get", return_value=error):
            assert self.client.fetch_paces("athlete-1") is None

    def test_invalid_json(self):
        """Test unparseable bodies mean no pace data."""
        with patch.object(self.client.session, "get", return_value=response(json_error=ValueError("bad"))):
            assert self.client.fetch_paces("athlete-1") is None

    def test_malformed_payload(self):
        """Test missing bands and wrong types mean no pace data."""
        with patch.object(self.client.session, "get", return_value=response({"paces": {"easy_min": 360}})):
            assert self.client.fetch_paces("athlete-1") is None
        with patch.object(self.client.session, "get", return_value=response(["not", "a", "dict"])):
            assert self.client.fetch_paces("athlete-1") is None

    def test_invalid_bands(self):
        """Test bands out of order are rejected."""
        paces = dict(VALID_PACES, threshold="5:00")
        with patch.object(self.client.session, "get", return_value=response({"paces": paces})):
            assert self.client.fetch_paces("athlete-1") is None

    def test_not_configured(self):
        """Test a client without a base URL never calls out."""
        client = ElitePaceClient(base_url="", token="")
        with patch.object(client.session, "get") as get:
            assert client.fetch_paces("athlete-1") is None
        get.assert_not_called()
        assert "Authorization" not in client.session.headers

    def test_request_errors_wrapped(self):
        """Test transport and decoding failures raise the provider error."""
        with patch.object(self.client.session, "get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(PaceProviderError, match="failed"):
                self.client._get("/athletes/athlete-1/paces")
        with patch.object(self.client.session, "get", return_value=response(json_error=ValueError("bad"))):
            with pytest.raises(PaceProviderError, match="Invalid JSON"):
                self.client._get("/athletes/athlete-1/paces")


class TestClientImport:
    """Test the client module imports on its own."""

    def test_import_in_fresh_interpreter(self):
        """Test importing the client first does not hit a circular import."""
        result = subprocess.run(
            [sys.executable, "-c", "from hyrox_programs.api.pace_client import ElitePaceClient"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr
