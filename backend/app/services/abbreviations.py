"""
Accounting Notes Backend: Abbreviation Table
============================================

What:  Ordered (token, expansion) pairs that turn accounting shorthand into
       words a speech engine pronounces correctly.
How:   Each token becomes a case-insensitive whole-word pattern. Patterns are
       applied longest token first; equal lengths keep table order.
Who:   Rule 5 of TextNormalizer.

Table rules:
    - Coded identifiers are spelled letter by letter ("NIP" → "en i pe").
    - Jargon expands to the full phrase ("KUP" → "koszty uzyskania przychodu").
    - No expansion may contain a token of the table as a whole word, so
      applying the table twice gives the same text as applying it once.
      tests/test_text_normalizer.py checks this for the default table.

Overrides:
    settings.abbreviations_file may name a JSON file holding either
    [["token", "expansion"], ...] or {"token": "expansion"}. Entries replace
    defaults with the same token (case-insensitive) and extend the table.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)

Entry = Tuple[str, str]


DEFAULT_ABBREVIATIONS: Sequence[Entry] = (
    # ── Identifiers spelled letter by letter ──────────────────────────────
    ("JPK_VAT", "jot pe ka wat"),
    ("JPK", "jot pe ka"),
    ("KSeF", "ka es e ef"),
    ("CEIDG", "ce e i de gie"),
    ("PKWiU", "pe ka wu i u"),
    ("VAT", "wat"),
    ("NIP", "en i pe"),
    ("CIT", "ce i te"),
    ("PIT", "pe i te"),
    ("ZUS", "zet u es"),
    ("KRS", "ka er es"),
    ("PKD", "pe ka de"),
    ("NBP", "en be pe"),
    ("PCC", "pe ce ce"),
    ("MSSF", "em es es ef"),
    ("KSR", "ka es er"),
    # ── Accounting jargon ─────────────────────────────────────────────────
    ("NKUP", "niestanowiące kosztów uzyskania przychodu"),
    ("KUP", "koszty uzyskania przychodu"),
    ("RZiS", "rachunek zysków i strat"),
    ("WNiP", "wartości niematerialne i prawne"),
    ("ZFŚS", "zakładowy fundusz świadczeń socjalnych"),
    ("RMK", "rozliczenia międzyokresowe kosztów"),
    ("UoR", "ustawa o rachunkowości"),
    ("ŚT", "środki trwałe"),
    ("US", "urząd skarbowy"),
    ("PK", "polecenie księgowania"),
    ("FV", "faktura"),
    ("WZ", "wydanie zewnętrzne"),
    ("PZ", "przyjęcie zewnętrzne"),
    ("KP", "kasa przyjmie"),
    ("KW", "kasa wypłaci"),
    ("Wn", "winien"),
    # ── General abbreviations ─────────────────────────────────────────────
    ("m.in.", "między innymi"),
    ("godz.", "godzina"),
    ("tzw.", "tak zwany"),
    ("itd.", "i tak dalej"),
    ("itp.", "i tym podobne"),
    ("art.", "artykuł"),
    ("ust.", "ustęp"),
    ("poz.", "pozycja"),
    ("tys.", "tysięcy"),
    ("dot.", "dotyczy"),
    ("np.", "na przykład"),
    ("tj.", "to jest"),
    ("ww.", "wyżej wymieniony"),
    ("ok.", "około"),
    ("pkt", "punkt"),
    ("mln", "milionów"),
    ("mld", "miliardów"),
    ("nr", "numer"),
    ("wg", "według"),
    ("zł", "złotych"),
    ("gr", "groszy"),
    ("r.", "roku"),
    # Symbols: expanded only when attached to a number or word
    ("%", " procent "),
    ("§", " paragraf "),
)


def _compile_token(token: str) -> Pattern[str]:
    """
    Builds the match pattern for one token.

    Word-boundary guards are added only on the sides where the token starts
    or ends with a word character, so "np." matches as a fixed token.

    Symbol-only tokens ("%", "§") match only next to a letter or digit
    ("23%", "§ 5"), so a note made of symbols alone stays unspeakable.
    """
    if not re.search(r"\w", token):
        escaped = re.escape(token)
        return re.compile(rf"(?<=\w)[^\S\n]*{escaped}|{escaped}(?=[^\S\n]*\w)")

    prefix = r"(?<!\w)" if re.match(r"\w", token[0]) else ""
    suffix = r"(?!\w)" if re.match(r"\w", token[-1]) else ""
    return re.compile(prefix + re.escape(token) + suffix, re.IGNORECASE)


class AbbreviationTable:
    """
    Immutable, ordered abbreviation table.

    Application order:
        sorted by token length, longest first (stable, so equal lengths keep
        the order they were given in). "JPK_VAT" therefore always runs before
        "JPK" and "VAT", and "NKUP" before "KUP".
    """

    def __init__(self, entries: Iterable[Entry]):
        cleaned: List[Entry] = []
        for token, expansion in entries:
            token = str(token).strip()
            if not token:
                continue
            cleaned.append((token, str(expansion)))

        self._entries: List[Entry] = sorted(cleaned, key=lambda e: len(e[0]), reverse=True)
        self._patterns: List[Tuple[Pattern[str], str]] = [
            (_compile_token(token), expansion) for token, expansion in self._entries
        ]

    @property
    def entries(self) -> List[Entry]:
        """Entries in application order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def apply(self, text: str) -> str:
        for pattern, expansion in self._patterns:
            # A callable replacement keeps backslashes in expansions literal
            text = pattern.sub(lambda _m, e=expansion: e, text)
        return text

    def merged_with(self, overrides: Iterable[Entry]) -> "AbbreviationTable":
        """
        Returns a new table where `overrides` replace entries with the same
        token (case-insensitive) and unknown tokens are appended.
        """
        merged = {token.casefold(): (token, expansion) for token, expansion in self._entries}
        for token, expansion in overrides:
            merged[str(token).strip().casefold()] = (str(token).strip(), str(expansion))
        return AbbreviationTable(merged.values())


def read_abbreviation_file(path: Path) -> List[Entry]:
    """
    Reads override entries from a JSON file.

    Accepts [["token", "expansion"], ...] or {"token": "expansion"}.

    Raises:
        ValueError: the file does not hold one of the two shapes
    """
    payload = json.loads(path.read_text(encoding="utf-8"))

    if isinstance(payload, dict):
        return [(str(k), str(v)) for k, v in payload.items()]

    if isinstance(payload, list):
        entries: List[Entry] = []
        for item in payload:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError(
                    f"Invalid abbreviation entry {item!r} in {path}: expected [token, expansion]"
                )
            entries.append((str(item[0]), str(item[1])))
        return entries

    raise ValueError(f"Abbreviation file {path} must contain a JSON object or list")


def load_abbreviation_table(path: Optional[str] = None) -> AbbreviationTable:
    """
    Builds the table used by the normalizer: defaults plus optional file.

    A missing file is logged and ignored; a malformed file raises so the
    misconfiguration surfaces at startup.
    """
    table = AbbreviationTable(DEFAULT_ABBREVIATIONS)
    if not path:
        return table

    file_path = Path(path).expanduser()
    if not file_path.exists():
        logger.warning("Abbreviations file %s not found, using defaults only", file_path)
        return table

    overrides = read_abbreviation_file(file_path)
    logger.info("Loaded %d abbreviation overrides from %s", len(overrides), file_path)
    return table.merged_with(overrides)
