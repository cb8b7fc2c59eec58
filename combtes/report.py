"""Text reports: candidates per TE type, final candidates per tool."""

from typing import Iterable, List, Optional, TextIO

from .candidates import Candidate, CandidateBlock, SequenceGroup
from .params import Params, get_tool
from .records import END_OF_SEQUENCE


def pred_filename(te_type: str, tool: str) -> str:
    return f"{te_type}_{tool}.pred"


def type_report_filename(te_type: str, tool: str) -> str:
    return f"{te_type}_{tool}-candidates.pred"


def final_report_filename(tool: str) -> str:
    return f"finalCandidates_{tool}.txt"


def candidate_line(c: Candidate, tool: str) -> str:
    metric = get_tool(tool).metric
    return (
        f"Candidate_{c.index} - FROM: {c.start} - TO: {c.end} - LENGTH: {c.length} - "
        f"{metric}: {c.best_metric_text} - SENSE: {c.strand} - CLASSIFICATION: {c.te_type}"
    )


def final_candidate_line(number: int, c: Candidate) -> str:
    return (
        f"CANDIDATE_{number} - FROM: {c.start} - TO: {c.end} - LENGTH: {c.length} - "
        f"SENSE: {c.strand} - CLASSIFICATION: {c.te_type}"
    )


def _distance_line(tool: str, params: Params) -> str:
    return (
        "Maximum distance between two predictions to consider them inside the same candidate: "
        f"{params.max_distance(tool)}.\n"
    )


def type_report_header(tool: str, te_type: str, params: Params) -> str:
    spec = get_tool(tool)
    return (
        f"Candidates of {spec.name} for *{te_type}*, from file \"{pred_filename(te_type, spec.name)}\".\n"
        + _distance_line(spec.name, params)
        + f"Thresholds for {spec.label} and length: {params.threshold(spec.name)} and "
        f"{params.min_length(spec.name)} nt.\n\n"
    )


def final_report_header(tool: str, params: Params) -> str:
    spec = get_tool(tool)
    return (
        f"Final candidates of {spec.name}, with the predictions used to generate each one.\n"
        + _distance_line(spec.name, params)
        + f"Threshold for {spec.label} and minimum length: {params.threshold(spec.name)} and "
        f"{params.min_length(spec.name)} nt.\n\n"
    )


def write_type_report(fh: TextIO, blocks: Iterable[CandidateBlock], tool: str, te_type: str,
                      params: Params) -> None:
    fh.write(type_report_header(tool, te_type, params))
    for block in blocks:
        fh.write(f"{block_header(block.sequence_id)}\n")
        for n, cand in enumerate(block.candidates):
            if n:
                fh.write("\n")
            fh.write(candidate_line(cand, tool) + "\n")
            for pred in cand.members:
                fh.write(pred.line + "\n")
        fh.write(f"{END_OF_SEQUENCE}\n\n")


def block_header(sequence_id: str) -> str:
    return f">>>SEQUENCE: {sequence_id}"


def final_block_lines(group: SequenceGroup) -> List[List[str]]:
    """One list of lines per surviving candidate, numbered from 1."""
    return [
        [final_candidate_line(k, cand)] + [pred.line for pred in cand.members]
        for k, cand in enumerate(group.final, 1)
    ]


def write_final_report(fh: TextIO, groups: Iterable[SequenceGroup], tool: str, params: Params,
                       stream: Optional[TextIO] = None) -> int:
    """
    Write the final candidates of each sequence; mirror them to stream.

    The stream copy has no header and no blank lines. Returns the number of
    final candidates written.
    """
    fh.write(final_report_header(tool, params))
    total = 0
    for group in groups:
        chunks = final_block_lines(group)
        if not chunks:
            continue
        fh.write(block_header(group.sequence_id) + "\n")
        if stream is not None:
            stream.write(block_header(group.sequence_id) + "\n")
        for n, lines in enumerate(chunks):
            if n:
                fh.write("\n")
            for line in lines:
                fh.write(line + "\n")
                if stream is not None:
                    stream.write(line + "\n")
        fh.write(f"{END_OF_SEQUENCE}\n\n")
        if stream is not None:
            stream.write(f"{END_OF_SEQUENCE}\n")
        total += len(chunks)
    return total
