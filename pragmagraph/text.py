"""Label text helpers: SVG line wrapping and LaTeX escaping."""

from __future__ import annotations

import re

# Average glyph width as a fraction of the font size
CHAR_WIDTH_FACTOR = 0.6
# Labels up to this many characters are never wrapped
WRAP_THRESHOLD = 20
LINE_HEIGHT_FACTOR = 1.2


def wrap_text(text: str, max_width: float, font_size: float) -> list[str]:
    """Greedy word wrap using an approximate character width.

    A single word is never split, even when it overflows.
    """
    words = text.split()
    if len(words) <= 1:
        return [text]

    max_chars = max(1, int(max_width // (font_size * CHAR_WIDTH_FACTOR)))
    lines: list[str] = []
    current = ""

    for word in words:
        if len(f"{current} {word}") <= max_chars:
            current = f"{current} {word}" if current else word
        else:
            if current:
                lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def label_lines(text: str, max_width: float | None, font_size: float) -> list[str]:
    """Lines a node label is drawn on. Short labels stay on one line."""
    if not max_width or len(text) <= WRAP_THRESHOLD:
        return [text]
    return wrap_text(text, max_width, font_size)


def line_offsets(count: int, font_size: float) -> list[float]:
    """Vertical offsets that centre ``count`` lines on the anchor."""
    line_height = font_size * LINE_HEIGHT_FACTOR
    first = -((count - 1) * line_height) / 2
    return [first + i * line_height for i in range(count)]


# --- LaTeX ---

GREEK_LETTERS = (
    "alpha", "beta", "gamma", "delta", "epsilon", "varepsilon", "zeta", "eta",
    "theta", "vartheta", "iota", "kappa", "lambda", "mu", "nu", "xi", "pi",
    "rho", "sigma", "tau", "upsilon", "phi", "varphi", "chi", "psi", "omega",
    "Gamma", "Delta", "Theta", "Lambda", "Xi", "Pi", "Sigma", "Upsilon",
    "Phi", "Psi", "Omega",
)
OPERATOR_COMMANDS = (
    "frac", "sqrt", "sum", "prod", "int", "lim", "infty", "cdot", "times",
    "leq", "geq", "neq", "approx", "rightarrow", "leftarrow", "Rightarrow",
    "Leftrightarrow", "forall", "exists", "neg", "land", "lor", "vdash",
    "models", "mathbb", "mathcal", "mathrm", "mathbf", "text", "textbf",
    "textit", "emph",
)

LATEX_PATTERNS = [
    re.compile(r"\$\$.+?\$\$", re.DOTALL),  # display math
    re.compile(r"\$.*?\$"),  # inline math
    re.compile(r"\\\[.*?\\\]", re.DOTALL),
    re.compile(r"\\\(.*?\\\)"),
    re.compile(r"\\(?:%s)\b" % "|".join(GREEK_LETTERS)),
    re.compile(r"\\(?:%s)\b" % "|".join(OPERATOR_COMMANDS)),
    re.compile(r"[_^]"),  # sub/superscripts
    re.compile(r"\\[{}]"),  # escaped braces
    re.compile(r"\\[A-Za-z]+\s*\{[^}]*\}"),  # \command{...}
    re.compile(r"\\[A-Za-z]+"),
]

# Characters that break a TikZ node body even inside author markup
TIKZ_BREAKING = re.compile(r"(?<!\\)([#%&])")

PLAIN_ESCAPES = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "^": r"\textasciicircum{}",
    "~": r"\textasciitilde{}",
}


def is_latex_content(text: str) -> bool:
    """Heuristic: does the label already contain LaTeX markup?

    Any ``_`` or ``^`` counts, so plain text using them is treated as math.
    """
    return any(pattern.search(text) for pattern in LATEX_PATTERNS)


def escape_latex(text: str) -> str:
    """Escape a label for a TikZ node body.

    Labels that look like LaTeX keep their markup and only get ``# % &``
    escaped; everything else is escaped for literal rendering.
    """
    if is_latex_content(text):
        return TIKZ_BREAKING.sub(r"\\\1", text)
    return "".join(PLAIN_ESCAPES.get(char, char) for char in text)
