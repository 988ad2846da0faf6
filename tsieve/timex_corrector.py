"""
Time-Value Corrector

Repairs systematic normalization errors of the upstream time tagger on
financial news, anchored to the document creation date:

1. "a year ago" / "a year earlier" refer to the fiscal quarter being reported
   a year back, not to a day.
2. "last year" / "N years ago" are over-specified by the tagger; only the year
   is kept.
3. "the latest quarter" is left as the underspecified "PXM" by the tagger; it
   is resolved to the fiscal quarter being reported.

Only the year and month of the creation date are read, and the month is not
range-checked: a month outside 1-12 disables the quarter rules alone.

Corrections are computed as values (TimexCorrection) from a read-only view of
the document; applying them is a separate, explicit step.
"""
from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, List, Optional, Tuple

from tsieve.documents import SieveDocument, Timex
from tsieve.logger import get_logger

logger = get_logger(__name__)


# ===| ENUMS |===

class CorrectionRule(StrEnum):
    """Which rule rewrote a value."""
    YEAR_AGO_QUARTER = "year_ago_quarter"
    TRUNCATE_TO_YEAR = "truncate_to_year"
    LATEST_QUARTER = "latest_quarter"


YEAR_AGO_TEXTS = ("a year ago", "a year earlier")
LAST_YEAR_TEXT = "last year"
YEARS_AGO_FRAGMENT = "years ago"
LATEST_QUARTER_TEXT = "the latest quarter"
UNSPECIFIED_MONTHS_VALUE = "PXM"


# ===| DATA CLASSES |===

@dataclass(frozen=True)
class TimexCorrection:
    """A replacement value for one time expression."""
    tid: str
    text: str
    old_value: Optional[str]
    new_value: str
    rule: CorrectionRule

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "tid": self.tid,
            "text": self.text,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "rule": self.rule.value,
        }


@dataclass(frozen=True)
class CreationDate:
    """Year and month of a document creation date, as written."""
    year: int
    month: int


# ===| RULES |===

def parse_creation_date(value: Optional[str]) -> Optional[CreationDate]:
    """
    Read a creation date given as YYYYMMDD or YYYY-MM-DD.

    Anything that is not exactly eight digits once dashes are removed returns
    None. The digits need not form a real calendar date.
    """
    if value is None:
        return None
    digits = str(value).replace("-", "")
    if len(digits) != 8 or not digits.isdigit():
        return None
    return CreationDate(year=int(digits[:4]), month=int(digits[4:6]))


def determine_fiscal_quarter(month: int) -> Optional[int]:
    """
    Fiscal quarter reported in the news during a calendar month.

    News discusses results about two quarters after they close, so the
    quarter is the current one minus two. Month 7 matches the 4-7 range
    first and therefore always counts as quarter 3.
    """
    if 10 <= month <= 12:
        current = 1
    elif 1 <= month <= 3:
        current = 2
    elif 4 <= month <= 7:
        current = 3
    elif 7 <= month <= 9:
        current = 4
    else:
        return None

    current -= 2
    if current < 1:
        current += 4
    return current


def revise_timex_value(
    text: Optional[str],
    value: Optional[str],
    creation_date: CreationDate
) -> Optional[Tuple[str, CorrectionRule]]:
    """Return (new value, rule) for a time expression, or None to leave it unchanged."""
    text = (text or "").strip().lower()
    revised: Optional[str] = None
    rule: Optional[CorrectionRule] = None

    if text in YEAR_AGO_TEXTS:
        quarter = determine_fiscal_quarter(creation_date.month)
        if quarter is not None:
            revised = f"{creation_date.year - 1}-Q{quarter}"
            rule = CorrectionRule.YEAR_AGO_QUARTER

    elif text == LAST_YEAR_TEXT or YEARS_AGO_FRAGMENT in text:
        if value:
            revised = value[:4]
            rule = CorrectionRule.TRUNCATE_TO_YEAR

    elif text == LATEST_QUARTER_TEXT and value == UNSPECIFIED_MONTHS_VALUE:
        quarter = determine_fiscal_quarter(creation_date.month)
        if quarter is not None:
            revised = f"{creation_date.year}-Q{quarter}"
            rule = CorrectionRule.LATEST_QUARTER

    if revised is None or revised == value:
        return None
    return revised, rule


def apply_corrections(timexes: List[Timex], corrections: List[TimexCorrection]) -> int:
    """Write corrected values into the matching timexes. Returns the number updated."""
    by_tid = {c.tid: c for c in corrections}
    updated = 0
    for timex in timexes:
        correction = by_tid.get(timex.tid)
        if correction is not None:
            timex.value = correction.new_value
            updated += 1
    return updated


# ===| CORRECTOR |===

class TimexCorrector:
    """Computes and applies value corrections for a document's time expressions."""

    def propose(self, doc: SieveDocument) -> List[TimexCorrection]:
        """Corrections for every timex in doc, without touching the document."""
        creation_time = doc.creation_time()
        if creation_time is None:
            logger.debug(f"{doc.name}: no creation time, timex values left as tagged")
            return []

        creation_date = parse_creation_date(creation_time.value)
        if creation_date is None:
            logger.debug(f"{doc.name}: creation time {creation_time.value!r} is not a YYYYMMDD date")
            return []

        return self.propose_for(doc.timexes(), creation_date)

    def propose_for(self, timexes: List[Timex], creation_date: CreationDate) -> List[TimexCorrection]:
        corrections = []
        for timex in timexes:
            revision = revise_timex_value(timex.text, timex.value, creation_date)
            if revision is None:
                continue
            new_value, rule = revision
            corrections.append(TimexCorrection(
                tid=timex.tid,
                text=timex.text,
                old_value=timex.value,
                new_value=new_value,
                rule=rule
            ))
        return corrections

    def apply(self, doc: SieveDocument) -> List[TimexCorrection]:
        """Correct doc's timexes in place and return what changed."""
        corrections = self.propose(doc)
        apply_corrections(doc.timexes(), corrections)
        if corrections:
            logger.debug(f"{doc.name}: corrected {len(corrections)} timex values")
        return corrections

    def correct_timexes(self, timexes: List[Timex], document_date: Optional[str]) -> List[TimexCorrection]:
        """Correct a bare list of timexes against a creation date string."""
        creation_date = parse_creation_date(document_date)
        if creation_date is None:
            return []
        corrections = self.propose_for(timexes, creation_date)
        apply_corrections(timexes, corrections)
        return corrections
