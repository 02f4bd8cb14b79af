"""Funk nesting limits.

Every pass is recursive over the tree and each Funk call costs about a dozen
Python frames, so the host recursion limit is raised well above the deepest
program the interpreter accepts.
"""

from __future__ import annotations

import sys

# Deepest chain of nested Funk calls before evaluation gives up.
MAX_CALL_DEPTH = 1000

RECURSION_LIMIT = 20000


def raise_recursion_limit() -> None:
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)
