"""TikZ renderer for a settled ring layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..paths import VisualAttributes
from ..types import EdgeKey, PathDescriptor, Point
from .utils import color_definitions, format_float, latex_escape_keep_math

if TYPE_CHECKING:
    from ..coordinator import LayoutCoordinator

PT_PER_CM = 28.3464567
NORMALIZED_SPAN_CM = 8.0

standalone_tpl = r"""\documentclass[border=2pt]{standalone}
\usepackage[utf8]{inputenc}
\usepackage{adjustbox}
\usepackage{tikz}
\tikzset{
  ring/.style={line width=0.4pt, dash pattern=on 2pt off 2pt, draw=gray},
  item/.style={draw=black, fill=white, line width=0.6pt},
  itemlabel/.style={font=\footnotesize, inner sep=1pt},
}
%% optional layers
\pgfdeclarelayer{bg}\pgfdeclarelayer{fg}\pgfsetlayers{bg,main,fg}
\begin{document}
\begin{minipage}[t]{\linewidth}
%s

\begin{adjustbox}{max width=\linewidth, max totalheight=\textheight, keepaspectratio}
%s
\end{adjustbox}
\end{minipage}
\end{document}
"""


@dataclass
class RenderPlan:
    center: Point
    radius: float
    item_size: float
    height: float
    items: List[Tuple[int, Point]] = field(default_factory=list)
    connectors: List[Tuple[EdgeKey, PathDescriptor, VisualAttributes]] = field(default_factory=list)


def build_render_plan(coordinator: "LayoutCoordinator") -> RenderPlan:
    """Collect item centers and connector paths; raises if connectors are disabled."""

    coordinator.paths.require_surface()
    config = coordinator.config
    n = coordinator.item_count
    plan = RenderPlan(
        center=config.center,
        radius=config.radius,
        item_size=config.item_size,
        height=config.container_height,
    )
    for index in range(n):
        plan.items.append((index, coordinator.geometry.circle_position(index, n, config)))
    for conn in coordinator.paths.connectors:
        plan.connectors.append((conn.key, conn.path, coordinator.paths.visual_attributes(conn)))
    return plan


class _Transform:
    """Maps surface pixels (y down) to TikZ units (y up)."""

    def __init__(self, plan: RenderPlan, normalize: bool):
        if normalize:
            span = max(2.0 * (plan.radius + plan.item_size), 1e-9)
            self.scale = NORMALIZED_SPAN_CM / span
            self.origin = plan.center
            self.pt_per_px = self.scale * PT_PER_CM
        else:
            self.scale = 1.0 / PT_PER_CM  # 1px rendered as 1pt
            self.origin = (0.0, plan.height)
            self.pt_per_px = 1.0

    def point(self, pt: Point) -> str:
        x = (pt[0] - self.origin[0]) * self.scale
        y = (self.origin[1] - pt[1]) * self.scale
        return f"({format_float(x)}, {format_float(y)})"

    def length(self, value: float) -> str:
        return format_float(value * self.scale)


def _connector_line(path: PathDescriptor, attrs: VisualAttributes, color: str, tf: _Transform) -> str:
    style = (
        f"draw={color}, line width={format_float(attrs.width * tf.pt_per_px)}pt, "
        f"draw opacity={format_float(attrs.opacity)}"
    )
    if path.is_straight:
        return f"\\draw[{style}] {tf.point(path.start)} -- {tf.point(path.end)};"
    c1, c2 = path.cubic_controls()
    return (
        f"\\draw[{style}] {tf.point(path.start)} .. controls {tf.point(c1)} "
        f"and {tf.point(c2)} .. {tf.point(path.end)};"
    )


def _emit_tikz_picture(plan: RenderPlan, normalize: bool) -> str:
    tf = _Transform(plan, normalize)
    names, definitions = color_definitions([attrs.color for _, _, attrs in plan.connectors])

    lines: List[str] = list(definitions)
    lines.append("\\begin{tikzpicture}")

    lines.append("  \\begin{pgfonlayer}{bg}")
    lines.append(f"    \\draw[ring] {tf.point(plan.center)} circle ({tf.length(plan.radius)});")
    lines.append("  \\end{pgfonlayer}")
    lines.append("")

    lines.append("  \\begin{pgfonlayer}{main}")
    for key, path, attrs in plan.connectors:
        lines.append(f"    % connector {key[0]}-{key[1]}")
        lines.append("    " + _connector_line(path, attrs, names[attrs.color], tf))
    lines.append("  \\end{pgfonlayer}")
    lines.append("")

    half = plan.item_size / 2.0
    lines.append("  \\begin{pgfonlayer}{fg}")
    for index, (x, y) in plan.items:
        lower = tf.point((x - half, y + half))
        upper = tf.point((x + half, y - half))
        lines.append(f"    \\draw[item] {lower} rectangle {upper};")
        lines.append(f"    \\node[itemlabel] at {tf.point((x, y))} {{{index}}};")
    lines.append("  \\end{pgfonlayer}")
    lines.append("\\end{tikzpicture}")
    return "\n".join(lines)


def generate_tikz_code(coordinator: "LayoutCoordinator", *, normalize: bool = False) -> str:
    """Generate a ``tikzpicture`` for the coordinator's current layout."""

    plan = build_render_plan(coordinator)
    return _emit_tikz_picture(plan, normalize)


def generate_tikz_document(
    coordinator: "LayoutCoordinator",
    *,
    title: Optional[str] = None,
    normalize: bool = False,
) -> str:
    """Render a standalone document around :func:`generate_tikz_code`."""

    header = ""
    if title:
        header = "\\noindent\\textbf{" + latex_escape_keep_math(title.strip()) + "}\\par\\vspace{4pt}\n"
    return standalone_tpl % (header, generate_tikz_code(coordinator, normalize=normalize))
