"""
Accounting Notes Backend: Text Normalizer
=========================================

What:  Rewrites raw note content into text a speech engine can read aloud.
How:   Eight regex passes in a fixed order. Later passes assume the cleanup
       done by earlier ones, so the order must not change.
Who:   NotesService, before deciding whether a note gets narration at all.

Pass order:
    1. emoji / pictographs / symbol blocks  → one space each
    2. zero-width characters, BOM           → removed
    3. leading list markers per line        → removed
    4. inline " - " / " • " separators      → one space
    5. abbreviation table                   → spoken form
    6. dates D.M.Y, D/M/Y, D-M-Y            → "D M Y roku"
    7. "N. " at line start, indent allowed   → "Punkt N: "
    8. whitespace cleanup, max one blank line, trim

The function is total: None and "" give "", nothing raises.
"""

import re
from typing import Optional, Pattern, Sequence, Tuple

from app.config import settings
from app.services.abbreviations import AbbreviationTable, load_abbreviation_table

# ── Pass 1: pictographs and symbol blocks ─────────────────────────────────
_PICTOGRAPH_RANGES = (
    (0x1F000, 0x1FAFF),  # emoji, flags, skin tones, mahjong/cards
    (0x2600, 0x27BF),    # misc symbols, dingbats
    (0x2190, 0x21FF),    # arrows
    (0x2300, 0x23FF),    # misc technical
    (0x25A0, 0x25FF),    # geometric shapes
    (0x2B00, 0x2BFF),    # misc symbols and arrows
    (0x2022, 0x2023),    # bullet, triangular bullet
    (0x2043, 0x2043),    # hyphen bullet
    (0x2219, 0x2219),    # bullet operator
    (0x20E3, 0x20E3),    # combining keycap
)

# ── Pass 2: invisible characters ──────────────────────────────────────────
_ZERO_WIDTH_RANGES = (
    (0x200B, 0x200F),    # zero-width space/joiners, LRM, RLM
    (0x2060, 0x2064),    # word joiner, invisible operators
    (0xFEFF, 0xFEFF),    # byte order mark
    (0x00AD, 0x00AD),    # soft hyphen
    (0xFE00, 0xFE0F),    # variation selectors
)


def _char_class(ranges: Sequence[Tuple[int, int]]) -> Pattern[str]:
    return re.compile(
        "[" + "".join(f"{re.escape(chr(lo))}-{re.escape(chr(hi))}" for lo, hi in ranges) + "]"
    )


_PICTOGRAPH_RE = _char_class(_PICTOGRAPH_RANGES)
_ZERO_WIDTH_RE = _char_class(_ZERO_WIDTH_RANGES)

# ── Pass 3: list markers at the start of a line ───────────────────────────
# Stacked markers ("* - a) text") are removed together.
# Single-level "3. " is left alone here; pass 7 turns it into "Punkt 3: ".
_LIST_MARKER_RE = re.compile(
    r"^[^\S\n]*"
    r"(?:(?:"
    r"[-–—*+·>]"                     # bullet glyphs
    r"|[IVXLCDM]{1,6}[.)]"           # Roman numerals: "IV." "II)"
    r"|[ivxlcdm]{1,6}\)"             # lower-case Roman: "iv)"
    r"|\d{1,3}\)"                    # Arabic with parenthesis: "3)"
    r"|\d{1,2}(?:\.\d{1,2})+\."      # multi-level Arabic: "1.2." "2.3.1."
    r"|[A-Za-z]\)"                   # letters: "a)" "B)"
    r")[^\S\n]+)+",
    re.MULTILINE,
)

# ── Pass 4: inline separators with spaces on both sides ───────────────────
_INLINE_SEPARATOR_RE = re.compile(r"[^\S\n]+(?:[-–—·][^\S\n]+)+")

# ── Pass 6: numeric dates, same separator twice, four-digit year ──────────
_DATE_RE = re.compile(
    r"(?<!\d)(\d{1,2})([./-])(\d{1,2})\2(\d{4})(?!\d)(?:[^\S\n]+roku(?!\w))?"
)

# ── Pass 7: ordinal list numerals ─────────────────────────────────────────
_ORDINAL_RE = re.compile(r"^[^\S\n]*(\d{1,3})\.[^\S\n]+", re.MULTILINE)

# ── Pass 8: whitespace ────────────────────────────────────────────────────
_HORIZONTAL_WS_RE = re.compile(r"[^\S\n]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

# Anything that is a letter or a digit in any script
_MEANINGFUL_RE = re.compile(r"[^\W_]")


def is_meaningful(text: Optional[str]) -> bool:
    """
    True when `text` contains at least one letter or digit.

    Punctuation, whitespace and symbols alone do not count, so callers must
    branch on this rather than on len(text).
    """
    return bool(text) and _MEANINGFUL_RE.search(text) is not None


class TextNormalizer:
    """
    Deterministic text-to-speech pre-processor for Polish accounting notes.

    Args:
        abbreviations: Table for pass 5. Defaults to the built-in table plus
            settings.abbreviations_file.
    """

    def __init__(self, abbreviations: Optional[AbbreviationTable] = None):
        if abbreviations is None:
            abbreviations = load_abbreviation_table(settings.abbreviations_file)
        self.abbreviations = abbreviations

    def normalize(self, raw: Optional[str]) -> str:
        if not raw:
            return ""

        text = _PICTOGRAPH_RE.sub(" ", raw)
        text = _ZERO_WIDTH_RE.sub("", text)
        text = _LIST_MARKER_RE.sub("", text)
        text = _INLINE_SEPARATOR_RE.sub(" ", text)
        text = self.abbreviations.apply(text)
        text = _DATE_RE.sub(lambda m: f"{m.group(1)} {m.group(3)} {m.group(4)} roku", text)
        text = _ORDINAL_RE.sub(lambda m: f"Punkt {m.group(1)}: ", text)
        return self._collapse_whitespace(text)

    @staticmethod
    def _collapse_whitespace(text: str) -> str:
        text = _HORIZONTAL_WS_RE.sub(" ", text)
        text = "\n".join(line.strip() for line in text.split("\n"))
        text = _BLANK_LINES_RE.sub("\n\n", text)
        return text.strip()


# ── Singleton Instance ────────────────────────────────────────────────────
text_normalizer = TextNormalizer()
