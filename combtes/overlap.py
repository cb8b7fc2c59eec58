"""
Overlap resolution between candidates of different TE types.

Two same-strand candidates overlap when their intervals intersect and either
one contains the other, or their starts (or ends) differ by at most
overlap_fraction * length of the smaller one. The weaker of an overlapping
pair is eliminated:

  HMMER         lower e-value wins
  RepeatMasker  higher SW score wins
  tie           longer candidate wins, then the earlier one (first argument)

The scan is greedy and depends on the start-sorted order. Its early exit
(same strand, no overlap -> stop scanning for this candidate) can miss a
later candidate that a long merged candidate still contains; this matches
the established output and is kept as is.
"""

import logging
from enum import Enum
from typing import List

from .candidates import Candidate, SequenceGroup
from .params import get_tool

logger = logging.getLogger(__name__)


class Verdict(Enum):
    STRANDS_DIFFER = "strands_differ"
    NO_OVERLAP = "no_overlap"
    FIRST_LOSES = "first_loses"
    SECOND_LOSES = "second_loses"


def intervals_overlap(x: Candidate, y: Candidate, overlap_fraction: float) -> bool:
    """Position test only; strands are not checked here."""
    if not (x.end > y.start and y.end > x.start):
        return False
    max_outside = overlap_fraction * min(x.length, y.length)
    if (x.start <= y.start and y.end <= x.end) or (y.start <= x.start and x.end <= y.end):
        return True
    return abs(x.start - y.start) <= max_outside or abs(x.end - y.end) <= max_outside


def compare(x: Candidate, y: Candidate, tool: str, overlap_fraction: float) -> Verdict:
    if x.strand != y.strand:
        return Verdict.STRANDS_DIFFER
    if not intervals_overlap(x, y, overlap_fraction):
        return Verdict.NO_OVERLAP

    if get_tool(tool).lower_is_better:
        x_better, y_better = x.best_metric < y.best_metric, x.best_metric > y.best_metric
    else:
        x_better, y_better = x.best_metric > y.best_metric, x.best_metric < y.best_metric
    if x_better:
        return Verdict.SECOND_LOSES
    if y_better:
        return Verdict.FIRST_LOSES
    return Verdict.SECOND_LOSES if x.length >= y.length else Verdict.FIRST_LOSES


def resolve_overlaps(candidates: List[Candidate], tool: str, overlap_fraction: float) -> List[Candidate]:
    """
    Flag the losers of overlapping pairs as eliminated.

    candidates must be sorted by start. Returns the survivors in order.
    """
    get_tool(tool)
    n = len(candidates)
    for i in range(n - 1):
        first = candidates[i]
        for j in range(i + 1, n):
            if first.eliminated:
                break
            second = candidates[j]
            verdict = compare(first, second, tool, overlap_fraction)
            if verdict is Verdict.SECOND_LOSES:
                second.eliminated = True
                logger.debug(f"{second.sequence_id}: {_describe(second)} eliminated by {_describe(first)}")
            elif verdict is Verdict.FIRST_LOSES:
                first.eliminated = True
                logger.debug(f"{first.sequence_id}: {_describe(first)} eliminated by {_describe(second)}")
            elif verdict is Verdict.NO_OVERLAP:
                break
    return [c for c in candidates if not c.eliminated]


def resolve_group(group: SequenceGroup, tool: str, overlap_fraction: float) -> SequenceGroup:
    survivors = resolve_overlaps(group.candidates, tool, overlap_fraction)
    dropped = len(group.candidates) - len(survivors)
    if dropped:
        logger.info(f"{group.sequence_id}: {dropped} of {len(group.candidates)} candidate(s) eliminated by overlap")
    return group


def _describe(c: Candidate) -> str:
    return f"{c.te_type} Candidate_{c.index} [{c.start}-{c.end}] {c.strand}"
