# src/explainable_todo/tasks/similarity.py

from __future__ import annotations

NEAR_DUPLICATE_THRESHOLD = 0.70


def is_near_duplicate(a: str | None, b: str | None) -> bool:
    """
    Decide whether two task texts name "the same task".

    - blank (after strip) on either side -> False
    - identical after strip -> True
    - otherwise compare lower-cased whitespace token sets: the shared-token
      count over each set's size gives two ratios; True iff the larger one
      reaches NEAR_DUPLICATE_THRESHOLD.

    Symmetric by construction.
    """
    a_trim = (a or "").strip()
    b_trim = (b or "").strip()
    if not a_trim or not b_trim:
        return False
    if a_trim == b_trim:
        return True

    wa = set(a_trim.lower().split())
    wb = set(b_trim.lower().split())
    if not wa or not wb:
        return False

    inter = len(wa & wb)
    return max(inter / len(wa), inter / len(wb)) >= NEAR_DUPLICATE_THRESHOLD
