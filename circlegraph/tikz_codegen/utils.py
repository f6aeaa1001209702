import math
import re
import unicodedata
from typing import Dict, List, Tuple

_MATH_DELIM_RE = re.compile(r'(?<!\\)(\$\$|\$)')  # unescaped $ or $$
_HEX_COLOR_RE = re.compile(r'^#?([0-9a-fA-F]{6})$')

_TEXT_ESCAPES = {
    '\\': r'\textbackslash{}',
    '&': r'\&',
    '%': r'\%',
    '#': r'\#',
    '_': r'\_',
    '{': r'\{',
    '}': r'\}',
    '~': r'\textasciitilde{}',
    '^': r'\textasciicircum{}',
}


def format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Cannot format non-finite float for TikZ output")
    formatted = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if formatted in ("", "-0") else formatted


def _escape_text_segment(text: str) -> str:
    text = unicodedata.normalize('NFC', text)
    return ''.join(_TEXT_ESCAPES.get(c, c) for c in text)


def latex_escape_keep_math(s: str) -> str:
    """Escape LaTeX specials outside ``$...$`` / ``$$...$$`` and keep math untouched."""

    parts: List[str] = []
    pos = 0
    current_delim = None

    for m in _MATH_DELIM_RE.finditer(s):
        delim = m.group(1)
        start, end = m.span()
        chunk = s[pos:start]
        parts.append(chunk if current_delim else _escape_text_segment(chunk))
        parts.append(delim)
        if current_delim is None:
            current_delim = delim
        elif delim == current_delim:
            current_delim = None
        pos = end

    tail = s[pos:]
    parts.append(tail if current_delim else _escape_text_segment(tail))
    return ''.join(parts)


def color_definitions(colors: List[str]) -> Tuple[Dict[str, str], List[str]]:
    """Map ``#rrggbb`` colors to TikZ color names and their ``\\definecolor`` lines."""

    names: Dict[str, str] = {}
    lines: List[str] = []
    for color in colors:
        if color in names:
            continue
        match = _HEX_COLOR_RE.match(color)
        if not match:
            # named xcolor colors pass through unchanged
            names[color] = color
            continue
        name = f"cg{len(lines)}"
        names[color] = name
        lines.append(f"\\definecolor{{{name}}}{{HTML}}{{{match.group(1).upper()}}}")
    return names, lines
