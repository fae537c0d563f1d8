"""Address normalisation and structured parsing for Brazilian addresses."""

import re
import unicodedata
from typing import Optional

from controle_tecnicos.models import ParsedAddress

COUNTRY = "Brasil"

_DASHES = str.maketrans({"–": "-", "—": "-"})
_NUMBER_TOKEN_RE = re.compile(r"\b\d+\b")
_DOUBLE_SPACE_RE = re.compile(r"\s{2,}")


def normalise(raw: Optional[str]) -> str:
    """Strip diacritics, unify dashes and collapse whitespace."""
    if not raw:
        return ""
    decomposed = unicodedata.normalize("NFD", raw)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.translate(_DASHES).split())


def mentions_brazil(text: str) -> bool:
    return COUNTRY.lower() in text.lower()


def with_country(raw: Optional[str]) -> str:
    """Trim *raw* and append ', Brasil' unless the country is already named."""
    text = (raw or "").strip()
    if not text or mentions_brazil(text):
        return text
    return f"{text}, {COUNTRY}"


def strip_house_numbers(street: str) -> str:
    """Drop standalone numeric tokens, e.g. 'Rua X 120' -> 'Rua X'."""
    return _DOUBLE_SPACE_RE.sub(" ", _NUMBER_TOKEN_RE.sub("", street)).strip()


def _is_uf(token: str) -> bool:
    return len(token) == 2 and token.isascii() and token.isalpha()


def parse_structured(text: str) -> ParsedAddress:
    """
    Parse ``"<street>, <city> - <UF>, Brasil"``.

    The last comma separates the country, the comma before it separates
    the street from the locality, and the last hyphen of the locality
    separates the city from the two-letter state. Anything that does not
    fit returns an unmatched result.
    """
    head, sep, country = text.strip().rpartition(",")
    if not sep or country.strip().lower() != COUNTRY.lower():
        return ParsedAddress.unmatched()

    street, sep, locality = head.rpartition(",")
    if not sep:
        return ParsedAddress.unmatched()

    city, sep, state = locality.rpartition("-")
    city, state = city.strip(), state.strip()
    if not sep or not city or not _is_uf(state):
        return ParsedAddress.unmatched()

    return ParsedAddress.of(street.strip(), city, state.upper())
