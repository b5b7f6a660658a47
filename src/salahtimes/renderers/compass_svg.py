"""SVG Qibla compass renderer.

Produces a self-contained SVG string for embedding via st.markdown() or
st.components.v1.html(). Uses viewBox="-1 -1 2 2.3" so the dial is centred on
the origin with radius 1, leaving a strip below it for the caption. The
browser handles all scaling.

Coordinate system:
  bearing 0° = up (north), increasing clockwise
  SVG y-axis is top-down, so north is y = -1
"""

from __future__ import annotations

import math

from salahtimes.i18n import t
from salahtimes.models import QiblaResult
from salahtimes.qibla import COMPASS_POINTS

_BG = "#0f3d3e"
_RING_COLOR = "#c9a96e"
_TICK_COLOR = "#e8dcc0"
_NEEDLE_COLOR = "#f0c060"


def _polar(bearing_deg: float, radius: float) -> tuple[float, float]:
    """Compass bearing + radius → SVG (x, y)."""
    rad = math.radians(bearing_deg)
    return radius * math.sin(rad), -radius * math.cos(rad)


def render_compass_svg(qibla: QiblaResult, lang: str = "en", size_px: int = 280) -> str:
    """Return an SVG compass with a needle pointing at the Kaaba.

    Degenerate positions (at the Kaaba or its antipode) draw a centred marker
    and a caption instead of a needle.

    Args:
        qibla: Computed Qibla result.
        lang: Language code for the caption.
        size_px: Rendered width/height in CSS pixels.

    Returns:
        SVG markup string.
    """
    parts: list[str] = [
        f'<circle cx="0" cy="0" r="0.98" fill="{_BG}" stroke="{_RING_COLOR}" stroke-width="0.02"/>'
    ]

    # Minor ticks every 15°, major every 45° with a label.
    for deg in range(0, 360, 15):
        major = deg % 45 == 0
        x0, y0 = _polar(deg, 0.86 if major else 0.9)
        x1, y1 = _polar(deg, 0.96)
        parts.append(
            f'<line x1="{x0:.4f}" y1="{y0:.4f}" x2="{x1:.4f}" y2="{y1:.4f}"'
            f' stroke="{_TICK_COLOR}" stroke-width="{0.012 if major else 0.006}"/>'
        )
    for i, label in enumerate(COMPASS_POINTS):
        x, y = _polar(i * 45, 0.72)
        size = 0.14 if len(label) == 1 else 0.1
        parts.append(
            f'<text x="{x:.4f}" y="{y:.4f}" fill="{_TICK_COLOR}" font-size="{size}"'
            f' text-anchor="middle" dominant-baseline="central">{label}</text>'
        )

    if qibla.bearing_deg is None:
        caption = t(f"qibla_{qibla.degenerate}", lang)
        parts.append(f'<circle cx="0" cy="0" r="0.08" fill="{_NEEDLE_COLOR}"/>')
    else:
        tip_x, tip_y = _polar(qibla.bearing_deg, 0.62)
        left_x, left_y = _polar(qibla.bearing_deg - 90, 0.05)
        right_x, right_y = _polar(qibla.bearing_deg + 90, 0.05)
        tail_x, tail_y = _polar(qibla.bearing_deg + 180, 0.18)
        parts.append(
            f'<polygon points="{tip_x:.4f},{tip_y:.4f} {left_x:.4f},{left_y:.4f}'
            f' {tail_x:.4f},{tail_y:.4f} {right_x:.4f},{right_y:.4f}"'
            f' fill="{_NEEDLE_COLOR}"/>'
        )
        parts.append(f'<circle cx="0" cy="0" r="0.03" fill="{_RING_COLOR}"/>')
        caption = f"{qibla.bearing_deg:.1f}° {qibla.compass_direction}"

    body = "\n    ".join(parts)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="-1 -1 2 2.3"'
        f' width="{size_px}" height="{round(size_px * 1.15)}" role="img">\n'
        f"    {body}\n"
        f'    <text x="0" y="1.18" fill="{_RING_COLOR}" font-size="0.12"'
        f' text-anchor="middle">{caption}</text>\n'
        f"</svg>"
    )
