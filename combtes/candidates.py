"""
Candidates: runs of same-strand predictions close enough to be one feature.

build_candidates() folds the records of one .pred file (one TE type) into
candidates per sequence; merge_sequence_groups() pools the candidates of all
TE types per sequence, sorted by start, ready for overlap resolution.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .params import Params, get_tool
from .records import Prediction, SequenceEnd, SequenceStart

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    sequence_id: str
    te_type: str
    strand: str
    start: int
    end: int
    best_metric: float
    best_metric_text: str
    members: List[Prediction] = field(default_factory=list)
    index: int = 0
    eliminated: bool = False

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @classmethod
    def open(cls, sequence_id: str, te_type: str, pred: Prediction) -> "Candidate":
        return cls(
            sequence_id=sequence_id,
            te_type=te_type,
            strand=pred.strand,
            start=pred.start,
            end=pred.end,
            best_metric=pred.metric,
            best_metric_text=pred.metric_text,
            members=[pred],
        )

    def accepts(self, pred: Prediction, max_distance: int) -> bool:
        return pred.strand == self.strand and (pred.start - self.end) <= max_distance

    def absorb(self, pred: Prediction, lower_is_better: bool) -> None:
        if pred.end > self.end:
            self.end = pred.end
        better = pred.metric < self.best_metric if lower_is_better else pred.metric > self.best_metric
        if better:
            self.best_metric = pred.metric
            self.best_metric_text = pred.metric_text
        self.members.append(pred)


CandidateBlock = namedtuple("CandidateBlock", ["sequence_id", "candidates"])


def keep_prediction(pred: Prediction, tool: str, params: Params) -> bool:
    """Score, length and (RepeatMasker only) LTR filters."""
    spec = get_tool(tool)
    if pred.length < params.min_length(spec.name):
        return False
    if spec.lower_is_better:
        return pred.metric <= params.threshold(spec.name)
    if pred.metric < params.threshold(spec.name):
        return False
    if params.include_ltrs:
        return True
    return not params.ltr_regex.search(pred.matching_repeat or "")


def build_candidates(records: Iterable, tool: str, params: Params, te_type: str) -> List[CandidateBlock]:
    """
    Merge the predictions of each sequence block into candidates.

    A kept prediction extends the open candidate when it is on the same strand
    and starts at most max_distance after the candidate's current end;
    otherwise the open candidate is closed and a new one starts. Filtered
    predictions are skipped without touching the open candidate. The end of
    a block (or of the input) closes it.

    Only blocks with at least one candidate are returned, in input order.
    """
    spec = get_tool(tool)
    max_distance = params.max_distance(spec.name)

    blocks: List[CandidateBlock] = []
    seq_id: Optional[str] = None
    found: List[Candidate] = []
    current: Optional[Candidate] = None

    def close_candidate():
        nonlocal current
        if current is not None:
            current.index = len(found) + 1
            found.append(current)
            current = None

    def close_block():
        nonlocal seq_id, found
        close_candidate()
        if seq_id is not None and found:
            blocks.append(CandidateBlock(seq_id, found))
        seq_id = None
        found = []

    for rec in records:
        if isinstance(rec, SequenceStart):
            close_block()
            seq_id = rec.seq_id
        elif isinstance(rec, SequenceEnd):
            close_block()
        elif isinstance(rec, Prediction):
            if seq_id is None:
                logger.debug(f"{te_type}: prediction outside a sequence block ignored: {rec.line}")
                continue
            if not keep_prediction(rec, spec.name, params):
                continue
            if current is not None and current.accepts(rec, max_distance):
                current.absorb(rec, spec.lower_is_better)
            else:
                close_candidate()
                current = Candidate.open(seq_id, te_type, rec)
    close_block()

    n_cands = sum(len(b.candidates) for b in blocks)
    logger.info(f"{te_type} ({spec.name}): {n_cands} candidate(s) in {len(blocks)} sequence(s)")
    return blocks


# -----------------------------
# Cross-classification merge
# -----------------------------
@dataclass
class SequenceGroup:
    sequence_id: str
    candidates: List[Candidate] = field(default_factory=list)

    @property
    def final(self) -> List[Candidate]:
        return [c for c in self.candidates if not c.eliminated]


def candidates_by_sequence(blocks: Iterable[CandidateBlock]) -> Dict[str, List[Candidate]]:
    by_seq: Dict[str, List[Candidate]] = {}
    for block in blocks:
        if block.sequence_id in by_seq:
            logger.warning(f"sequence {block.sequence_id} appears in more than one block; keeping the last one")
        by_seq[block.sequence_id] = block.candidates
    return by_seq


def merge_sequence_groups(per_type: Dict[str, Dict[str, List[Candidate]]],
                          te_types: Iterable[str]) -> List[SequenceGroup]:
    """
    Pool candidates of every TE type per sequence and sort them by start.

    Sequences are returned in first-seen order (TE types in the given order);
    ties on start keep TE-type order, then candidate order.
    """
    te_types = list(te_types)
    groups: Dict[str, SequenceGroup] = {}
    for te_type in te_types:
        for seq_id in per_type.get(te_type, {}):
            groups.setdefault(seq_id, SequenceGroup(seq_id))
    for group in groups.values():
        pooled = []
        for te_type in te_types:
            pooled.extend(per_type.get(te_type, {}).get(group.sequence_id, []))
        group.candidates = sorted(pooled, key=lambda c: c.start)
    return [g for g in groups.values() if g.candidates]
