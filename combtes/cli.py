"""
Final TE candidates for one tool (HMMER or RepeatMasker).

For every TE type, reads <in_dir>/<TEtype>_<TOOL>.pred, merges nearby
same-strand predictions into candidates and writes
<out_dir>/<TEtype>_<TOOL>-candidates.pred. Candidates of all TE types are
then pooled per sequence; when two of them overlap, the one with the best
e-value (HMMER) or SW score (RepeatMasker) is kept. The result goes to
<out_dir>/finalCandidates_<TOOL>.txt and to stdout for the calling pipeline.

Usage:
  combtes HMMER -i preds/ -o out/ -p params.yaml
  combtes RepeatMasker --include-ltrs yes --max-dist 500 > final_rm.txt
"""

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, TextIO

from .candidates import (CandidateBlock, SequenceGroup, build_candidates, candidates_by_sequence,
                         merge_sequence_groups)
from .errors import CombTEsError, PredictionFileError, ReportError
from .overlap import resolve_group
from .params import Params, get_tool, load_params
from .records import iter_records
from .report import (final_report_filename, pred_filename, type_report_filename,
                     write_final_report, write_type_report)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(levelname)s: %(message)s"
    )


# --------------------------- pipeline ---------------------------------

def read_te_type(in_dir: Path, te_type: str, tool: str, params: Params) -> List[CandidateBlock]:
    path = in_dir / pred_filename(te_type, tool)
    try:
        # undecodable bytes become U+FFFD and the line parses as inert
        with open(path, errors="replace") as fh:
            lines = fh.readlines()
    except OSError as err:
        raise PredictionFileError(path, err.strerror or err) from err
    return build_candidates(iter_records(lines, tool, source=str(path)), tool, params, te_type)


def run(tool: str, params: Params, in_dir=".", out_dir=".", stream: Optional[TextIO] = None,
        threads: int = 1) -> List[SequenceGroup]:
    """
    Build, resolve and report the final candidates of one tool.

    All prediction files are read before any report is written, so a missing
    file leaves no partial output behind.
    """
    tool = get_tool(tool).name
    in_dir, out_dir = Path(in_dir), Path(out_dir)

    def work(te_type):
        return read_te_type(in_dir, te_type, tool, params)

    if threads > 1 and len(params.te_types) > 1:
        with ThreadPoolExecutor(max_workers=threads) as ex:
            per_type_blocks = list(ex.map(work, params.te_types))
    else:
        per_type_blocks = [work(t) for t in params.te_types]

    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ReportError(out_dir, err.strerror or err) from err

    per_type = {}
    for te_type, blocks in zip(params.te_types, per_type_blocks):
        report = out_dir / type_report_filename(te_type, tool)
        try:
            with open(report, "w") as fh:
                write_type_report(fh, blocks, tool, te_type, params)
        except OSError as err:
            raise ReportError(report, err.strerror or err) from err
        logger.info(f"Wrote {report}")
        per_type[te_type] = candidates_by_sequence(blocks)

    groups = merge_sequence_groups(per_type, params.te_types)
    for group in groups:
        resolve_group(group, tool, params.overlap_fraction)

    final = out_dir / final_report_filename(tool)
    try:
        with open(final, "w") as fh:
            total = write_final_report(fh, groups, tool, params, stream=stream)
    except OSError as err:
        raise ReportError(final, err.strerror or err) from err
    logger.info(f"Wrote {total} final candidate(s) for {len(groups)} sequence(s) to {final}")
    return groups


# --------------------------- main ---------------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="combtes",
        description="Build non-overlapping final TE candidates from HMMER or RepeatMasker predictions.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("tool", help="HMMER or RepeatMasker")
    ap.add_argument("-i", "--in-dir", default=".", help="Directory holding <TEtype>_<TOOL>.pred files")
    ap.add_argument("-o", "--out-dir", default=".", help="Directory for the reports")
    ap.add_argument("-p", "--params", default=None, help="YAML parameter file")
    ap.add_argument("--te-types", nargs="+", default=None, help="TE types to combine (overrides the file)")
    ap.add_argument("--threshold", type=float, default=None,
                    help="E-value (HMMER) or SW score (RepeatMasker) threshold for this tool")
    ap.add_argument("--min-len", type=int, default=None, help="Minimum prediction length for this tool")
    ap.add_argument("--max-dist", type=int, default=None,
                    help="Maximum distance between two predictions of the same candidate for this tool")
    ap.add_argument("--overlap-fraction", type=float, default=None,
                    help="Part of the smaller candidate allowed outside the overlap")
    ap.add_argument("--include-ltrs", choices=["yes", "no"], default=None,
                    help="Keep RepeatMasker predictions whose matching repeat is an LTR")
    ap.add_argument("-t", "--threads", type=int, default=1, help="TE types to process in parallel")
    ap.add_argument("--no-stream", action="store_true", help="Do not copy the final candidates to stdout")
    ap.add_argument("--plot", default=None, metavar="PDF", help="Also plot the final candidates to this PDF")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug messages on stderr")
    return ap


def cli_overrides(args, tool: str) -> dict:
    overrides = {
        "te_types": args.te_types,
        "overlap_fraction": args.overlap_fraction,
        "include_ltrs": args.include_ltrs,
    }
    for key, value in (("filter_tools", args.threshold), ("dist_preds", args.max_dist),
                       ("min_len_pred", args.min_len)):
        if value is not None:
            overrides[key] = {tool: value}
    return overrides


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        tool = get_tool(args.tool).name
        params = load_params(args.params, cli_overrides(args, tool))
        groups = run(tool, params, args.in_dir, args.out_dir,
                     stream=None if args.no_stream else sys.stdout, threads=args.threads)
        if args.plot:
            from .plot import plot_final_candidates
            try:
                plot_final_candidates(groups, params.te_types, args.plot, tool)
            except OSError as err:
                raise ReportError(args.plot, err.strerror or err) from err
    except CombTEsError as e:
        logger.error(str(e))
        return 1
    return 0
