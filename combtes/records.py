"""
Parsing of the .pred files written by the HMMER / RepeatMasker extractor.

Layout of one file (one TE type, one tool):

    >>>SEQUENCE: seq1
    PREDIC---FROM--ff---TO--tt---LENGTH--ll---EVALUE--ev---SCORE--sc---SENSE--d---TETYPE--Gypsy
    PREDIC---FROM--ff---TO--tt---LENGTH--ll---RMSCORE--sc---SENSE--d---MATCHINGREPEAT--name---TETYPE--Gypsy
    ###
"""

import logging
import re
from collections import namedtuple
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from .params import HMMER, REPEATMASKER, get_tool

logger = logging.getLogger(__name__)

SEQUENCE_TAG = ">>>SEQUENCE"
END_OF_SEQUENCE = "###"

seq_re = re.compile(r">>>SEQUENCE: (?P<seq_id>.*)")

RECORD_RES = {
    HMMER: re.compile(
        r"FROM--(?P<start>\d+)---TO--(?P<end>\d+)---LENGTH--(?P<length>\d+)"
        r"---EVALUE--(?P<metric>.*)---SCORE--.*---SENSE--(?P<strand>.*)---TETYPE--(?P<te_type>.*)"
    ),
    REPEATMASKER: re.compile(
        r"FROM--(?P<start>\d+)---TO--(?P<end>\d+)---LENGTH--(?P<length>\d+)"
        r"---RMSCORE--(?P<metric>\d+)---SENSE--(?P<strand>.*)"
        r"---MATCHINGREPEAT--(?P<matching_repeat>.*)---TETYPE--(?P<te_type>.*)"
    ),
}


@dataclass(frozen=True)
class Prediction:
    start: int
    end: int
    length: int
    metric: float
    metric_text: str    # as written in the input, reproduced in reports
    strand: str
    te_type: str
    line: str
    matching_repeat: Optional[str] = None


SequenceStart = namedtuple("SequenceStart", ["seq_id"])


class SequenceEnd:
    __slots__ = ()

    def __repr__(self):
        return "SequenceEnd()"


SEQUENCE_END = SequenceEnd()

Parsed = Union[Prediction, SequenceStart, SequenceEnd, None]


def parse_line(line: str, tool: str) -> Parsed:
    """
    Classify one input line.

    Returns a SequenceStart, SEQUENCE_END, a Prediction, or None for lines
    that are neither (those are ignored by the caller).
    """
    tool = get_tool(tool).name
    line = line.rstrip("\r\n")
    if line == END_OF_SEQUENCE:
        return SEQUENCE_END
    if SEQUENCE_TAG in line:
        m = seq_re.search(line)
        return SequenceStart(m.group("seq_id") if m else "")

    m = RECORD_RES[tool].search(line)
    if not m:
        return None
    metric_text = m.group("metric").strip()
    try:
        metric = float(metric_text)
    except ValueError:
        return None
    return Prediction(
        start=int(m.group("start")),
        end=int(m.group("end")),
        length=int(m.group("length")),
        metric=metric,
        metric_text=metric_text,
        strand=m.group("strand"),
        te_type=m.group("te_type"),
        line=line,
        matching_repeat=m.groupdict().get("matching_repeat"),
    )


def iter_records(lines: Iterable[str], tool: str, source: str = "<input>") -> Iterator[Parsed]:
    """Parse lines lazily, dropping the inert ones."""
    skipped = 0
    for lineno, line in enumerate(lines, 1):
        rec = parse_line(line, tool)
        if rec is None:
            if line.strip():
                skipped += 1
                logger.debug(f"{source}:{lineno}: ignoring line: {line.rstrip()}")
            continue
        yield rec
    if skipped:
        logger.info(f"{source}: ignored {skipped} unrecognized line(s)")
