"""Heuristic normalizer for OCR'd single-line US street addresses.

Address regions on licenses are recognized as one noisy line that often has
its spaces dropped, e.g. ``123MAINST.APT2CA90210-1234``. Structure is
re-derived from positional and lexical cues in a fixed order:

1. strip periods and commas (hyphens stay for ZIP+4)
2. trailing ZIP or ZIP+4
3. two-letter state code in front of the ZIP
4. apartment / unit marker anywhere in the line
5. leading house number, the rest is the street
6. repair of house numbers glued to an ordinal street (``257024THST``)

and the parts are joined back as
``house street APT n STATE ZIP``. This is not a general address grammar.
"""

import re
from dataclasses import dataclass

from src.utils.logger import get_logger

logger = get_logger(__name__)

_PUNCTUATION_RE = re.compile(r"[.,]")
_ZIP_RE = re.compile(r"(\d{5}(?:-\d{4})?)$")
_STATE_RE = re.compile(r"([A-Za-z]{2})$")
# Markers match in any case; letters glued before UNIT must be upper case.
_APARTMENT_RE = re.compile(r"(?i:APT)\s*(\d+)|#\s*(\d+)|[A-Z]*(?i:UNIT)\s*(\d+)")
_HOUSE_NUMBER_RE = re.compile(r"^(\d+)(.*)$", re.DOTALL)

ORDINAL_SUFFIXES = ("TH", "ND", "RD", "ST")
# Longest house number accepted before an ordinal street is assumed glued on.
MAX_HOUSE_NUMBER_DIGITS = 4


@dataclass
class AddressParts:
    """Components recovered from one address line."""

    house_number: str = ""
    street: str = ""
    apt_number: str = ""
    state_code: str = ""
    zip_code: str = ""

    def is_empty(self) -> bool:
        return not (
            self.house_number
            or self.street
            or self.apt_number
            or self.state_code
            or self.zip_code
        )

    def render(self) -> str:
        """Join the non-empty parts in canonical order."""
        parts = [
            self.house_number,
            self.street,
            f"APT {self.apt_number}" if self.apt_number else "",
            self.state_code,
            self.zip_code,
        ]
        return " ".join(p for p in parts if p)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _take_zip(text: str) -> tuple[str, str]:
    match = _ZIP_RE.search(text)
    if not match:
        return text, ""
    return text[: match.start()].rstrip(), match.group(1)


def _take_state(text: str) -> tuple[str, str]:
    match = _STATE_RE.search(text)
    if not match:
        return text, ""
    return text[: match.start()].rstrip(), match.group(1)


def _take_apartment(text: str) -> tuple[str, str]:
    match = _APARTMENT_RE.search(text)
    if not match:
        return text, ""
    number = next(g for g in match.groups() if g is not None)
    return text[: match.start()] + " " + text[match.end() :], number


def _split_house_number(text: str) -> tuple[str, str]:
    match = _HOUSE_NUMBER_RE.match(text)
    if not match:
        return "", text
    return match.group(1), match.group(2)


def _repair_glued_ordinal(house_number: str, street: str) -> tuple[str, str]:
    """Split ``257024`` + ``THSTREET`` into ``2570`` + ``24TH STREET``.

    ``street`` is the untrimmed remainder after the digit run, so a number
    followed by a space is never treated as glued.
    """
    if len(house_number) <= MAX_HOUSE_NUMBER_DIGITS:
        return house_number, street
    if street[:2].upper() not in ORDINAL_SUFFIXES:
        return house_number, street

    carried = house_number[MAX_HOUSE_NUMBER_DIGITS:]
    repaired = carried + street[:2] + " " + street[2:]
    logger.debug("Repaired glued ordinal: %s%s -> %s", house_number, street, repaired)
    return house_number[:MAX_HOUSE_NUMBER_DIGITS], repaired


def parse_address(text: str) -> AddressParts | None:
    """Break an address line into its parts.

    Args:
        text: Trimmed recognized text.

    Returns:
        The recovered parts, or ``None`` when nothing usable remains.
    """
    working = _PUNCTUATION_RE.sub("", text).strip()
    if not working:
        return None

    parts = AddressParts()
    working, parts.zip_code = _take_zip(working)
    # Only trust a trailing letter pair as a state when a ZIP anchored it;
    # otherwise every street ending in "...ET" would lose two letters.
    if parts.zip_code:
        working, parts.state_code = _take_state(working)
    working, parts.apt_number = _take_apartment(working)

    house_number, street = _split_house_number(working.strip())
    house_number, street = _repair_glued_ordinal(house_number, street)
    parts.house_number = house_number
    parts.street = _collapse(street)

    return None if parts.is_empty() else parts


def normalize_address(raw_text: str) -> str:
    """Canonicalize a recognized address line.

    Never raises: when no structure can be recovered the trimmed input is
    returned unchanged.

    Args:
        raw_text: Recognized text of an address region.

    Returns:
        Address as ``house street APT n STATE ZIP`` with absent parts omitted.
    """
    text = (raw_text or "").strip()
    if not text:
        return ""
    parts = parse_address(text)
    if parts is None:
        return text
    return parts.render()
