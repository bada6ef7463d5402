# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "roster_requests_total",
    "Total HTTP requests to the roster engine",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "roster_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "roster_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
SHUFFLES_TOTAL = Counter(
    "roster_shuffles_total",
    "Total shuffle runs",
    ["mode"],
)
SHUFFLE_DURATION = Histogram(
    "roster_shuffle_duration_seconds",
    "Time spent computing one shuffle",
    ["mode"],
)
CELLS_FILLED = Counter(
    "roster_cells_filled_total",
    "Cells filled by auto-assignment",
)
CELLS_UNFILLED = Counter(
    "roster_cells_unfilled_total",
    "Cells left empty because no candidate was available",
)
AUTO_CELLS_CLEARED = Counter(
    "roster_auto_cells_cleared_total",
    "Auto-assigned cells removed by clear-auto",
)
MANUAL_EDITS = Counter(
    "roster_manual_edits_total",
    "Administrator cell edits",
    ["action"],
)
ACTIVE_ROSTERS = Gauge(
    "roster_active_rosters",
    "Number of rosters held in memory",
)
CONFLICTING_CELLS = Gauge(
    "roster_conflicting_cells",
    "Conflicting cells found by the last conflict scan",
    ["roster"],
)
SAVES_TOTAL = Counter(
    "roster_saves_total",
    "Roster saves pushed to the persistence service",
    ["outcome"],
)
