"""
Dashboard Components Package

Core components for the hydrological monitoring operations dashboard.
The Streamlit tabs and the backend data loader are imported from their
own modules so the core stays importable without a front end.
"""

from .time_window import (
    TimeWindow,
    WindowError,
    validate_window,
    default_window,
)

from .report_engine import (
    ReportQueryEngine,
    ReportState,
    FetchRequest,
    ReportResult,
    REPORT_CONFIGS,
)

from .export_coordinator import (
    ExportCoordinator,
    ExportFormat,
)

from .auto_loop import (
    AutoLoopScheduler,
    AutoLoopRunner,
    LoopMode,
)

from .aggregator import (
    DashboardAggregator,
    DashboardSnapshot,
)

from .statistics import axis_max

from .cache_manager import (
    LastKnownCache,
    CACHE_DIR
)

__all__ = [
    # Time window
    'TimeWindow',
    'WindowError',
    'validate_window',
    'default_window',

    # Reports
    'ReportQueryEngine',
    'ReportState',
    'FetchRequest',
    'ReportResult',
    'REPORT_CONFIGS',

    # Exports
    'ExportCoordinator',
    'ExportFormat',

    # Auto-loop
    'AutoLoopScheduler',
    'AutoLoopRunner',
    'LoopMode',

    # Overview snapshot
    'DashboardAggregator',
    'DashboardSnapshot',
    'axis_max',

    # Cache management
    'LastKnownCache',
    'CACHE_DIR'
]
