"""
Prospect Dedup: Duplicate Clustering

Groups transitively linked pairs (A~B, B~C => {A, B, C}) with a disjoint-set
structure keyed by record identifier.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Hashable, Iterable

from ..models import CandidateRecord, DuplicateGroup, ScoredPair


class UnionFind:
    """Union-find with path compression and union by size."""

    def __init__(self) -> None:
        self.parent: dict[Hashable, Hashable] = {}
        self.size: dict[Hashable, int] = {}

    def add(self, x: Hashable) -> None:
        if x not in self.parent:
            self.parent[x] = x
            self.size[x] = 1

    def find(self, x: Hashable) -> Hashable:
        self.add(x)
        while self.parent[x] != x:
            self.parent[x] = self.parent[self.parent[x]]  # path compression
            x = self.parent[x]
        return x

    def union(self, x: Hashable, y: Hashable) -> Hashable:
        rx, ry = self.find(x), self.find(y)
        if rx == ry:
            return rx
        if self.size[rx] < self.size[ry]:
            rx, ry = ry, rx
        self.parent[ry] = rx
        self.size[rx] += self.size[ry]
        return rx

    def groups(self) -> dict[Hashable, list[Hashable]]:
        """Return groups as {root: [members]}, members in insertion order."""
        result: dict[Hashable, list[Hashable]] = defaultdict(list)
        for x in self.parent:
            result[self.find(x)].append(x)
        return dict(result)


def record_key(record: CandidateRecord) -> Hashable:
    """Graph node for a record: its identifier, or object identity for ad-hoc records."""
    if record.record_id is not None:
        return ("id", record.record_id)
    return ("obj", id(record))


def group(pairs: Iterable[ScoredPair]) -> list[DuplicateGroup]:
    """
    Build duplicate groups from qualifying pairs.

    Every pair is an edge; connected components of size >= 2 are returned,
    ordered by first appearance in ``pairs``. Records never seen in a pair
    cannot appear in the output.
    """
    uf = UnionFind()
    records: dict[Hashable, CandidateRecord] = {}
    edges: list[tuple[Hashable, float]] = []

    for pair in pairs:
        key_a = record_key(pair.record_a)
        key_b = record_key(pair.record_b)
        records.setdefault(key_a, pair.record_a)
        records.setdefault(key_b, pair.record_b)
        uf.union(key_a, key_b)
        edges.append((key_a, pair.result.score))

    pair_counts: dict[Hashable, int] = defaultdict(int)
    max_scores: dict[Hashable, float] = defaultdict(float)
    for key, pair_score in edges:
        root = uf.find(key)
        pair_counts[root] += 1
        max_scores[root] = max(max_scores[root], pair_score)

    result: list[DuplicateGroup] = []
    for root, members in uf.groups().items():
        if len(members) < 2:
            continue
        result.append(
            DuplicateGroup(
                records=tuple(records[m] for m in members),
                pair_count=pair_counts[root],
                max_score=max_scores[root],
            )
        )
    return result
