"""Circular foreign key detection over the declared dependency graph."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable

import networkx as nx

from sqldiag.models import RelationshipEdge

logger = logging.getLogger(__name__)


def build_dependency_graph(edges: Iterable[RelationshipEdge]) -> nx.DiGraph:
    """Table-level child -> parent graph.

    Only ``declared`` edges are used; inferred guesses never create a cycle.

    Args:
        edges: Column-level relationship edges.

    Returns:
        Directed graph whose nodes are ``schema.table`` strings.
    """
    graph = nx.DiGraph()
    for edge in edges:
        if edge.source != "declared":
            continue
        graph.add_edge(edge.child.table_key, edge.parent.table_key)
    return graph


def find_cycle_members(graph: nx.DiGraph) -> set[Hashable]:
    """Every node that lies on at least one directed cycle.

    Depth-first traversal from each node with outgoing edges, in sorted
    order. The path travels with each stack frame as an immutable tuple
    plus a frozenset for membership, so frames never alias each other.
    Reaching a node already on the path marks the path from that node's
    position to the tip. Nodes already marked, and nodes whose successors
    were exhausted without closing a cycle, are not explored again, so each
    node is expanded at most once.

    A self-referencing table counts as a cycle of length one.

    Args:
        graph: Directed graph; node identities must be sortable.

    Returns:
        Union of all cycle members (membership, not a partition into cycles).
    """
    members: set[Hashable] = set()
    # Fully explored without reaching the path they were entered from.
    done: set[Hashable] = set()
    starts = sorted(node for node in graph.nodes if graph.out_degree(node) > 0)

    for start in starts:
        if start in members or start in done:
            continue

        stack: list[tuple[Hashable, tuple[Hashable, ...], frozenset[Hashable], bool]] = [
            (start, (), frozenset(), False)
        ]
        while stack:
            node, path, on_path, leaving = stack.pop()
            if leaving:
                if node not in members:
                    done.add(node)
                continue
            if node in on_path:
                members.update(path[path.index(node) :])
                continue
            if node in members or node in done:
                continue

            next_path = path + (node,)
            next_on_path = on_path | {node}
            stack.append((node, path, on_path, True))
            # Reversed so successors are visited in sorted order.
            for successor in sorted(graph.successors(node), reverse=True):
                stack.append((successor, next_path, next_on_path, False))

    logger.debug("Cycle detection marked %d of %d node(s)", len(members), graph.number_of_nodes())
    return members


def find_table_cycles(edges: Iterable[RelationshipEdge]) -> list[str]:
    """Sorted ``schema.table`` names taking part in a declared FK cycle."""
    return sorted(str(node) for node in find_cycle_members(build_dependency_graph(edges)))
