"""Prometheus metrics for home-semantics."""

import threading
from http.server import HTTPServer, SimpleHTTPRequestHandler
from typing import Any

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


# Metric definitions
class SemanticsMetrics:
    """Collection of Prometheus metrics for the semantics service."""

    def __init__(self) -> None:
        """Initialize metrics."""
        # Tag registry
        self.tag_registry_entries = Gauge(
            "home_semantics_tag_registry_entries",
            "Number of lookup keys (ids and suffixes) in the tag registry",
        )

        self.tag_suffix_collisions = Gauge(
            "home_semantics_tag_suffix_collisions",
            "Number of tag id suffixes claimed by more than one definition",
        )

        # Classification
        self.items_processed_total = Counter(
            "home_semantics_items_processed_total",
            "Total number of items run through classification",
            ["result"],  # 'classified' or 'unclassified'
        )

        # Metadata cache
        self.metadata_events_total = Counter(
            "home_semantics_metadata_events_total",
            "Total number of metadata change notifications",
            ["kind"],  # added, updated, removed
        )

        self.metadata_records = Gauge(
            "home_semantics_metadata_records",
            "Number of resolved metadata records currently cached",
        )

        self.errors_total = Counter(
            "home_semantics_errors_total",
            "Total number of errors",
            ["error_type"],
        )

        # Item model
        self.item_model_reloads_total = Counter(
            "home_semantics_item_model_reloads_total",
            "Total number of item model file reloads",
            ["result"],  # 'success' or 'failure'
        )

        self.items_known = Gauge(
            "home_semantics_items_known",
            "Number of items in the item registry",
        )

        self.processing_duration_seconds = Histogram(
            "home_semantics_processing_duration_seconds",
            "Duration of a single item change being applied to the metadata cache",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
        )


# Global metrics instance
METRICS = SemanticsMetrics()


class MetricsHandler(SimpleHTTPRequestHandler):
    """HTTP handler for Prometheus metrics endpoint."""

    def do_GET(self) -> None:
        """Handle GET requests."""
        if self.path == "/metrics":
            self.send_response(200)
            self.send_header("Content-Type", CONTENT_TYPE_LATEST)
            self.end_headers()
            self.wfile.write(generate_latest())
        else:
            self.send_response(404)
            self.end_headers()

    def log_message(self, format: str, *args: Any) -> None:
        """Suppress request logging."""
        pass


class MetricsServer:
    """HTTP server for Prometheus metrics."""

    def __init__(self, port: int = 9090):
        """Initialize the metrics server.

        Args:
            port: Port to listen on.
        """
        self.port = port
        self._server: HTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the metrics server in a background thread."""
        self._server = HTTPServer(("0.0.0.0", self.port), MetricsHandler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the metrics server."""
        if self._server:
            self._server.shutdown()
