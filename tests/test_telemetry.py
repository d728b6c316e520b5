"""Unit tests for Sentry scrubbing and Prometheus helpers."""

from boxtobox.telemetry import get_metrics_text, record_board_generation, record_cell_query
from boxtobox.telemetry.sentry import scrub_sensitive_data


class TestScrubSensitiveData:

    def test_redacts_headers_and_query(self):
        event = {
            "request": {
                "headers": {"Authorization": "Bearer abc", "Accept": "application/json"},
                "query_string": "query=messi&token=abc",
                "data": {"rowLabels": ["Argentina"]},
            }
        }

        scrubbed = scrub_sensitive_data(event, {})

        assert scrubbed["request"]["headers"]["Authorization"] == "[REDACTED]"
        assert scrubbed["request"]["headers"]["Accept"] == "application/json"
        assert scrubbed["request"]["query_string"] == "query=messi&token=[REDACTED]"
        assert scrubbed["request"]["data"] == "[SCRUBBED]"

    def test_event_without_request(self):
        assert scrub_sensitive_data({"message": "x"}, {})["message"] == "x"


class TestMetrics:

    def test_board_metrics_exported(self):
        record_board_generation("fallback", 10)
        record_cell_query("empty")

        content, content_type = get_metrics_text()

        assert 'b2b_board_generation_total{outcome="fallback"}' in content
        assert 'b2b_cell_queries_total{outcome="empty"}' in content
        assert content_type.startswith("text/plain")
