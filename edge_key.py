"""edge_key.py

Canonical identity for undirected links.

A link between ``a`` and ``b`` is keyed by the sorted pair joined with ``-``,
so ``canonicalize("B", "A") == "A-B"``. Ids that contain the separator get a
length prefix on the first id (``"3:a-b-c"`` for ``("a-b", "c")``). Such keys
always contain at least two separators while plain keys contain exactly one,
so the two forms never collide and every key maps back to one unordered pair.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from errors import SelfLoopError

SEPARATOR = "-"


def canonicalize(a, b) -> str:
    """Return the EdgeKey for the unordered pair {a, b}.

    Raises SelfLoopError when ``a == b``.
    """
    a, b = str(a), str(b)
    if a == b:
        raise SelfLoopError(f"Self-loop on '{a}' has no edge key", field="target")

    first, second = sorted((a, b))
    if SEPARATOR in first or SEPARATOR in second:
        return f"{len(first)}:{first}{SEPARATOR}{second}"
    return f"{first}{SEPARATOR}{second}"


def endpoints_of(key: str) -> Tuple[str, str]:
    """Inverse of canonicalize: the sorted endpoint pair of ``key``."""
    head, sep, rest = key.partition(":")
    if sep and head.isdigit() and key.count(SEPARATOR) >= 2:
        size = int(head)
        first = rest[:size]
        if rest[size:size + 1] == SEPARATOR:
            return first, rest[size + 1:]

    first, sep, second = key.partition(SEPARATOR)
    if not sep or not first or not second:
        raise ValueError(f"Malformed edge key: {key!r}")
    return first, second


def path_edge_keys(path: Iterable) -> List[str]:
    """EdgeKeys of consecutive hops in ``path``; repeated hops (a, a) are skipped."""
    nodes = [str(n) for n in path]
    keys = []
    for u, v in zip(nodes, nodes[1:]):
        if u == v:
            continue
        keys.append(canonicalize(u, v))
    return keys
