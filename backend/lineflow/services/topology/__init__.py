"""Topology validation and live state reconciliation package.

Components:
- Topology: in-memory container of nodes and connections
- Graph: directed graph with deterministic adjacency order
- GraphAlgorithms: reachability, complete-path search, cycle detection
- TopologyValidator: pre-start rule set producing a ValidationResult
- LiveStateReconciler / ReconciliationLoop: push update merging
- ConnectionGeometryResolver: connection endpoint recomputation
- Topology exceptions: contract violation hierarchy

Example:
    >>> from lineflow.services.topology import Topology, TopologyValidator
    >>> result = TopologyValidator().validate_topology(topology)
    >>> result.is_valid
    True
"""

from lineflow.services.topology.algorithms import GraphAlgorithms
from lineflow.services.topology.exceptions import (
    ContractViolationError,
    ImmutableFieldError,
    TopologyError,
)
from lineflow.services.topology.geometry import (
    ConnectionGeometryResolver,
    ConnectorOffsets,
)
from lineflow.services.topology.graph import Graph
from lineflow.services.topology.model import Topology
from lineflow.services.topology.reconciler import (
    LiveStateReconciler,
    ReconciliationLoop,
    parse_push_update,
)
from lineflow.services.topology.validator import TopologyValidator

__all__ = [
    # Model
    "Topology",
    # Analysis
    "Graph",
    "GraphAlgorithms",
    "TopologyValidator",
    # Reconciliation
    "LiveStateReconciler",
    "ReconciliationLoop",
    "parse_push_update",
    # Geometry
    "ConnectionGeometryResolver",
    "ConnectorOffsets",
    # Exceptions
    "ContractViolationError",
    "ImmutableFieldError",
    "TopologyError",
]
