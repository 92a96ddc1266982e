"""Small undirected-graph helpers shared by the bridges and map generators."""

from __future__ import annotations

from collections import deque
from typing import Callable, Dict, Iterable, List, Sequence, Set, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def build_adjacency(node_count: int, edges: Iterable[Tuple[int, int]]) -> List[Set[int]]:
    """Return an adjacency list of sets; self-loops are dropped."""

    adjacency: List[Set[int]] = [set() for _ in range(node_count)]
    for a, b in edges:
        if a == b:
            continue
        adjacency[a].add(b)
        adjacency[b].add(a)
    return adjacency


def add_edge(adjacency: List[Set[int]], a: int, b: int) -> None:
    if a != b:
        adjacency[a].add(b)
        adjacency[b].add(a)


def reachable_from(adjacency: Sequence[Set[int]], start: int) -> Set[int]:
    """Breadth-first search returning every node reachable from ``start``."""

    seen = {start}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for neighbor in adjacency[node]:
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return seen


def is_connected(node_count: int, edges: Iterable[Tuple[int, int]]) -> bool:
    """True when every node is reachable from node 0 (vacuously true for n <= 1)."""

    if node_count <= 1:
        return True
    adjacency = build_adjacency(node_count, edges)
    return len(reachable_from(adjacency, 0)) == node_count


def compact_and_relabel(
    entities: Sequence[T],
    keep: Callable[[T], bool],
    id_of: Callable[[T], int],
    with_id: Callable[[T, int], T],
) -> Tuple[List[T], Dict[int, int]]:
    """Drop entities failing ``keep`` and renumber the survivors 0..k-1.

    Order is preserved. Returns the relabelled entities and the old-to-new id
    mapping, to be fed to :func:`remap_references` for anything pointing at
    the entities.
    """

    kept: List[T] = []
    mapping: Dict[int, int] = {}
    for entity in entities:
        if not keep(entity):
            continue
        new_id = len(kept)
        mapping[id_of(entity)] = new_id
        kept.append(with_id(entity, new_id))
    return kept, mapping


def remap_references(
    references: Iterable[R],
    mapping: Dict[int, int],
    endpoints_of: Callable[[R], Tuple[int, ...]],
    with_endpoints: Callable[[R, Tuple[int, ...]], R],
) -> List[R]:
    """Rewrite id references through ``mapping``; references to dropped ids are removed."""

    remapped: List[R] = []
    for reference in references:
        endpoints = endpoints_of(reference)
        if any(endpoint not in mapping for endpoint in endpoints):
            continue
        remapped.append(with_endpoints(reference, tuple(mapping[e] for e in endpoints)))
    return remapped
