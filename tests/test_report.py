import io

from combtes.candidates import Candidate, CandidateBlock, SequenceGroup
from combtes.records import Prediction
from combtes.report import (candidate_line, final_candidate_line, final_report_header, type_report_header,
                            write_final_report, write_type_report)


def pred(line, start=1, end=2):
    return Prediction(start, end, end - start + 1, 1.0, "1", "d", "Gypsy", line)


def candidate(index, start, end, metric_text="1e-12", te_type="Gypsy", strand="d", members=("P1",)):
    return Candidate("seq1", te_type, strand, start, end, float(metric_text), metric_text,
                     members=[pred(m) for m in members], index=index)


def test_candidate_line():
    c = candidate(2, 100, 250, metric_text="3.2e-15", te_type="Copia", strand="r")
    assert candidate_line(c, "HMMER") == (
        "Candidate_2 - FROM: 100 - TO: 250 - LENGTH: 151 - EVALUE: 3.2e-15 - SENSE: r - CLASSIFICATION: Copia")
    rm = candidate(1, 5, 50, metric_text="455")
    assert "- RMSCORE: 455 -" in candidate_line(rm, "RepeatMasker")


def test_final_candidate_line_drops_metric():
    c = candidate(4, 100, 250, te_type="Bel")
    assert final_candidate_line(1, c) == (
        "CANDIDATE_1 - FROM: 100 - TO: 250 - LENGTH: 151 - SENSE: d - CLASSIFICATION: Bel")


def test_headers(params):
    assert type_report_header("HMMER", "Gypsy", params) == (
        'Candidates of HMMER for *Gypsy*, from file "Gypsy_HMMER.pred".\n'
        "Maximum distance between two predictions to consider them inside the same candidate: 300.\n"
        "Thresholds for E-value and length: 1e-05 and 20 nt.\n\n"
    )
    assert final_report_header("RepeatMasker", params) == (
        "Final candidates of RepeatMasker, with the predictions used to generate each one.\n"
        "Maximum distance between two predictions to consider them inside the same candidate: 300.\n"
        "Threshold for SWscore and minimum length: 300 and 20 nt.\n\n"
    )


def test_write_type_report(params):
    blocks = [CandidateBlock("seq1", [candidate(1, 10, 90, members=("P1", "P2")), candidate(2, 500, 700)])]
    fh = io.StringIO()
    write_type_report(fh, blocks, "HMMER", "Gypsy", params)
    body = fh.getvalue().split("\n\n", 1)[1]
    assert body == (
        ">>>SEQUENCE: seq1\n"
        "Candidate_1 - FROM: 10 - TO: 90 - LENGTH: 81 - EVALUE: 1e-12 - SENSE: d - CLASSIFICATION: Gypsy\n"
        "P1\nP2\n"
        "\n"
        "Candidate_2 - FROM: 500 - TO: 700 - LENGTH: 201 - EVALUE: 1e-12 - SENSE: d - CLASSIFICATION: Gypsy\n"
        "P1\n"
        "###\n\n"
    )


def test_write_final_report_and_stream(params):
    kept = candidate(3, 10, 90, te_type="Copia", members=("A1", "A2"))
    gone = candidate(1, 20, 80, te_type="Bel")
    gone.eliminated = True
    other = candidate(1, 400, 600, te_type="Bel", strand="r", members=("B1",))
    groups = [SequenceGroup("seq1", [kept, gone, other]), SequenceGroup("seq2", [])]
    fh, stream = io.StringIO(), io.StringIO()
    total = write_final_report(fh, groups, "HMMER", params, stream=stream)
    assert total == 2
    assert fh.getvalue().startswith("Final candidates of HMMER")
    assert fh.getvalue().split("\n\n", 1)[1] == (
        ">>>SEQUENCE: seq1\n"
        "CANDIDATE_1 - FROM: 10 - TO: 90 - LENGTH: 81 - SENSE: d - CLASSIFICATION: Copia\n"
        "A1\nA2\n"
        "\n"
        "CANDIDATE_2 - FROM: 400 - TO: 600 - LENGTH: 201 - SENSE: r - CLASSIFICATION: Bel\n"
        "B1\n"
        "###\n\n"
    )
    assert stream.getvalue() == (
        ">>>SEQUENCE: seq1\n"
        "CANDIDATE_1 - FROM: 10 - TO: 90 - LENGTH: 81 - SENSE: d - CLASSIFICATION: Copia\n"
        "A1\nA2\n"
        "CANDIDATE_2 - FROM: 400 - TO: 600 - LENGTH: 201 - SENSE: r - CLASSIFICATION: Bel\n"
        "B1\n"
        "###\n"
    )
