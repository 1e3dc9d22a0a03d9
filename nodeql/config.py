from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class NodeModelConfig:
    """Options shared by :class:`~nodeql.registry.NodeSchema` and the node model.

    Attributes:
        node_interface: Name of the interface every node-bearing type implements.
            Only types implementing it are considered when a query targets an
            interface or union.
        max_ancestor_depth: Upper bound on parent/owner hops taken by
            ``find_root_node_ancestor`` before the chain is reported as cyclic.
    """

    node_interface: str = 'Node'
    max_ancestor_depth: int = 100


DEFAULT_CONFIG = NodeModelConfig()
