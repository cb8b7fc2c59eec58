"""
Run parameters for building final candidates.

Defaults live in DEFAULT_PARAMS. A YAML parameter file can override any of
them, and the command line can override the file:

    te_types: [Bel, Copia, Gypsy]
    filter_tools:
      HMMER: 1.0e-5        # keep predictions with e-value <= this
      RepeatMasker: 300    # keep predictions with SW score >= this
    overlap_fraction: 0.5  # part of the smaller candidate allowed outside the overlap
    dist_preds:
      HMMER: 300
      RepeatMasker: 300
    min_len_pred:
      HMMER: 20
      RepeatMasker: 20
    ltr_pattern: "-LTR|_LTR"
    include_ltrs: no
"""

import copy
import logging
import re
from collections import namedtuple
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .errors import ParameterError, UnsupportedToolError

logger = logging.getLogger(__name__)

HMMER = "HMMER"
REPEATMASKER = "RepeatMasker"

# metric: name used in candidate lines; label: name used in report headers
ToolSpec = namedtuple("ToolSpec", ["name", "metric", "label", "lower_is_better"])

TOOLS = {
    HMMER: ToolSpec(HMMER, "EVALUE", "E-value", True),
    REPEATMASKER: ToolSpec(REPEATMASKER, "RMSCORE", "SWscore", False),
}


def get_tool(name: str) -> ToolSpec:
    try:
        return TOOLS[name]
    except (KeyError, TypeError):
        raise UnsupportedToolError(name) from None


DEFAULT_PARAMS = {
    "te_types": ["Bel", "Copia", "Gypsy"],
    "filter_tools": {HMMER: 1e-5, REPEATMASKER: 300},
    "overlap_fraction": 0.5,
    "dist_preds": {HMMER: 300, REPEATMASKER: 300},
    "min_len_pred": {HMMER: 20, REPEATMASKER: 20},
    "ltr_pattern": "-LTR|_LTR",
    "include_ltrs": False,
}

PER_TOOL_KEYS = ("filter_tools", "dist_preds", "min_len_pred")


@dataclass(frozen=True)
class Params:
    te_types: List[str] = field(default_factory=lambda: list(DEFAULT_PARAMS["te_types"]))
    filter_tools: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PARAMS["filter_tools"]))
    overlap_fraction: float = DEFAULT_PARAMS["overlap_fraction"]
    dist_preds: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PARAMS["dist_preds"]))
    min_len_pred: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PARAMS["min_len_pred"]))
    ltr_pattern: str = DEFAULT_PARAMS["ltr_pattern"]
    include_ltrs: bool = DEFAULT_PARAMS["include_ltrs"]

    def threshold(self, tool: str):
        return self.filter_tools[get_tool(tool).name]

    def max_distance(self, tool: str) -> int:
        return self.dist_preds[get_tool(tool).name]

    def min_length(self, tool: str) -> int:
        return self.min_len_pred[get_tool(tool).name]

    @property
    def ltr_regex(self):
        return re.compile(self.ltr_pattern)


# -----------------------------
# Loading
# -----------------------------
def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def _as_number(key: str, value, cast):
    # PyYAML reads "1e-5" (no dot) as a string
    if isinstance(value, bool):
        raise ParameterError(f"{key}: expected a number, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ParameterError(f"{key}: expected a number, got {value!r}") from None


def _as_int(key: str, value) -> int:
    number = _as_number(key, value, float)
    if not number.is_integer():
        raise ParameterError(f"{key}: expected a whole number, got {value!r}")
    return int(number)


def _as_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("yes", "true", "1"):
        return True
    if isinstance(value, str) and value.lower() in ("no", "false", "0"):
        return False
    raise ParameterError(f"{key}: expected yes/no, got {value!r}")


def build_params(raw: Dict[str, Any]) -> Params:
    """Validate a merged parameter mapping and freeze it into Params."""
    unknown = sorted(set(raw) - set(DEFAULT_PARAMS))
    if unknown:
        raise ParameterError(f"unknown parameter(s): {', '.join(unknown)}")

    te_types = raw["te_types"]
    if isinstance(te_types, str):
        te_types = [te_types]
    if not isinstance(te_types, (list, tuple)) or not te_types:
        raise ParameterError("te_types: expected a non-empty list of TE types")
    te_types = [str(t) for t in te_types]

    per_tool = {}
    for key in PER_TOOL_KEYS:
        values = raw[key]
        if not isinstance(values, dict):
            raise ParameterError(f"{key}: expected a mapping of tool -> value")
        for tool in values:
            if tool not in TOOLS:
                raise ParameterError(f"{key}: unknown tool {tool!r}")
        if key == "filter_tools":
            per_tool[key] = {tool: _as_number(f"{key}.{tool}", values[tool], float) for tool in TOOLS}
        else:
            per_tool[key] = {tool: _as_int(f"{key}.{tool}", values[tool]) for tool in TOOLS}
        if key != "filter_tools" and any(v < 0 for v in per_tool[key].values()):
            raise ParameterError(f"{key}: values must be >= 0")

    # RepeatMasker scores are integers; keep them printable as such
    score = per_tool["filter_tools"][REPEATMASKER]
    if score.is_integer():
        per_tool["filter_tools"][REPEATMASKER] = int(score)

    fraction = _as_number("overlap_fraction", raw["overlap_fraction"], float)
    if not 0 <= fraction <= 1:
        raise ParameterError(f"overlap_fraction: expected a value in [0, 1], got {fraction}")

    pattern = str(raw["ltr_pattern"])
    try:
        re.compile(pattern)
    except re.error as err:
        raise ParameterError(f"ltr_pattern: invalid regular expression {pattern!r}: {err}") from None

    return Params(
        te_types=te_types,
        filter_tools=per_tool["filter_tools"],
        overlap_fraction=fraction,
        dist_preds=per_tool["dist_preds"],
        min_len_pred=per_tool["min_len_pred"],
        ltr_pattern=pattern,
        include_ltrs=_as_bool("include_ltrs", raw["include_ltrs"]),
    )


def load_params(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Params:
    """
    Merge defaults, an optional YAML file and explicit overrides (in that order).

    Overrides use the same layout as the file; None values are ignored.
    """
    raw = copy.deepcopy(DEFAULT_PARAMS)
    if path:
        try:
            with open(path) as fh:
                file_params = yaml.safe_load(fh)
        except OSError as err:
            raise ParameterError(f"cannot read parameter file {path}: {err}") from err
        except yaml.YAMLError as err:
            raise ParameterError(f"cannot parse parameter file {path}: {err}") from err
        if file_params is None:
            file_params = {}
        if not isinstance(file_params, dict):
            raise ParameterError(f"parameter file {path} must hold a mapping")
        _deep_update(raw, file_params)
        logger.info(f"Loaded parameters from {path}")
    if overrides:
        _deep_update(raw, {k: v for k, v in overrides.items() if v is not None})
    return build_params(raw)
