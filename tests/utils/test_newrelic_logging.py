"""Tests for forwarding error logs to New Relic."""

from unittest.mock import patch

import pytest

from src.utils.newrelic_logging import newrelic_error_processor


class TestNewRelicErrorProcessor:
    @pytest.mark.parametrize("method_name", ["error", "critical"])
    @patch("src.utils.newrelic_logging.newrelic.agent.notice_error")
    def test_error_levels_are_reported(self, mock_notice_error, method_name):
        event_dict = {"message": "GitHub GET failed", "owner": "octocat"}

        result = newrelic_error_processor(None, method_name, event_dict)

        mock_notice_error.assert_called_once()
        assert result is event_dict

    @pytest.mark.parametrize("method_name", ["debug", "info", "warning"])
    @patch("src.utils.newrelic_logging.newrelic.agent.notice_error")
    def test_lower_levels_are_not_reported(self, mock_notice_error, method_name):
        newrelic_error_processor(None, method_name, {"message": "Rendering comments"})

        mock_notice_error.assert_not_called()
