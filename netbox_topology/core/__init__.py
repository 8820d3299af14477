"""
Core модули NetBox Topology.

- Snapshot: входной снапшот записей NetBox
- TopologyEngine: запуск разрешения топологии
- TopologyGraph: граф с узлами, рёбрами и тенантами
- RunContext: контекст выполнения
- Structured Logging: JSON/Human-readable логирование
- constants: дискриминаторы NetBox, виды узлов и рёбер
"""

from .constants import (
    RecordType,
    EntityKind,
    NodeKind,
    EdgeKind,
    UnresolvedReason,
    Severity,
)
from .context import (
    RunContext,
    get_current_context,
    set_current_context,
    RunContextFilter,
)
from .logging import (
    get_logger,
    setup_logging,
    setup_logging_from_config,
    StructuredLogger,
    JSONFormatter,
    HumanFormatter,
    LogContext,
    OperationLog,
    LogLevel,
    LogConfig,
    RotationType,
)
from .exceptions import (
    TopologyError,
    NetBoxError,
    NetBoxConnectionError,
    NetBoxAPIError,
    SnapshotError,
    NormalizationError,
    ResolutionError,
    ConfigError,
    format_error_for_log,
    is_retryable,
)
from .models import Ref, Diagnostic
from .snapshot import Snapshot
from .graph import TopologyGraph, GraphNode, GraphEdge
from .engine import TopologyEngine, ResolutionResult

__all__ = [
    # Constants
    "RecordType",
    "EntityKind",
    "NodeKind",
    "EdgeKind",
    "UnresolvedReason",
    "Severity",
    # Context
    "RunContext",
    "get_current_context",
    "set_current_context",
    "RunContextFilter",
    # Logging
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
    "StructuredLogger",
    "JSONFormatter",
    "HumanFormatter",
    "LogContext",
    "OperationLog",
    "LogLevel",
    "LogConfig",
    "RotationType",
    # Exceptions
    "TopologyError",
    "NetBoxError",
    "NetBoxConnectionError",
    "NetBoxAPIError",
    "SnapshotError",
    "NormalizationError",
    "ResolutionError",
    "ConfigError",
    "format_error_for_log",
    "is_retryable",
    # Engine
    "Ref",
    "Diagnostic",
    "Snapshot",
    "TopologyGraph",
    "GraphNode",
    "GraphEdge",
    "TopologyEngine",
    "ResolutionResult",
]
