"""
PDF overview of final candidates: one page per sequence.

Forward-strand candidates are drawn above the axis, everything else below,
coloured by TE type.
"""

import logging
from typing import Dict, List

from .candidates import SequenceGroup

logger = logging.getLogger(__name__)

# Cycled over the TE types in the order they are configured
TYPE_PALETTE = [
    "#0808f7", "#fc850e", "#05fc09", "#fc1413", "#f80bfb",
    "#20b5f4", "#7a001a", "#70403c", "#a67c52", "#333333",
]
FORWARD_STRANDS = {"d", "+", "forward", "F"}


def type_colors(te_types: List[str]) -> Dict[str, str]:
    return {t: TYPE_PALETTE[i % len(TYPE_PALETTE)] for i, t in enumerate(te_types)}


def draw_group(ax, group: SequenceGroup, colors: Dict[str, str], height: float = 0.6) -> None:
    from matplotlib.patches import Rectangle

    final = group.final
    for k, cand in enumerate(final, 1):
        y = 0.5 if cand.strand in FORWARD_STRANDS else -0.5
        lo, hi = sorted((cand.start, cand.end))
        ax.add_patch(Rectangle((lo, y - height / 2), hi - lo + 1, height,
                               facecolor=colors.get(cand.te_type, "#AAAAAA"),
                               edgecolor="black", linewidth=0.6))
        ax.text((lo + hi) / 2, y, str(k), ha="center", va="center", fontsize=7)
    if final:
        xmin = min(min(c.start, c.end) for c in final)
        xmax = max(max(c.start, c.end) for c in final)
        pad = max(1, (xmax - xmin) // 20)
        ax.set_xlim(xmin - pad, xmax + pad)
    ax.set_ylim(-1.2, 1.2)
    ax.axhline(0, color="#999999", linewidth=0.8)
    ax.set_yticks([-0.5, 0.5])
    ax.set_yticklabels(["reverse", "forward"])
    ax.set_xlabel("position (nt)")
    ax.set_title(f"{group.sequence_id}: {len(final)} final candidate(s)")


def plot_final_candidates(groups: List[SequenceGroup], te_types: List[str], out_pdf: str, tool: str) -> int:
    """Write one page per sequence that has final candidates. Returns the page count."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.backends.backend_pdf import PdfPages
    from matplotlib.patches import Patch

    colors = type_colors(te_types)
    legend = [Patch(facecolor=colors[t], edgecolor="black", label=t) for t in te_types]
    pages = 0
    with PdfPages(out_pdf) as pdf:
        for group in groups:
            if not group.final:
                continue
            fig, ax = plt.subplots(figsize=(12, 2.8))
            draw_group(ax, group, colors)
            ax.legend(handles=legend, loc="upper right", fontsize=7, title=tool, title_fontsize=7)
            plt.tight_layout()
            pdf.savefig(fig)
            plt.close(fig)
            pages += 1
    logger.info(f"Wrote {pages} page(s) to {out_pdf}")
    return pages
