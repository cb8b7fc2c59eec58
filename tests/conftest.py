import pytest

from combtes.params import Params
from combtes.records import Prediction


@pytest.fixture
def params():
    return Params(te_types=["Bel", "Copia", "Gypsy"])


@pytest.fixture
def make_prediction():
    def _make(start, end, metric, strand="d", te_type="Gypsy", length=None, repeat=None):
        return Prediction(
            start=start,
            end=end,
            length=end - start + 1 if length is None else length,
            metric=float(metric),
            metric_text=str(metric),
            strand=strand,
            te_type=te_type,
            line=f"PREDIC {start}-{end}",
            matching_repeat=repeat,
        )
    return _make
