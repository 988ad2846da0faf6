"""
Time-expression markup over an external time tagger.

The tagger itself (tokenization, recognition, normalization relative to the
creation date) is an external service; this module only drives it sentence
by sentence, converts its output to Timex values, numbers them across the
document and post-corrects their values.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from tsieve.documents import SieveDocument, Timex, TimexType
from tsieve.logger import get_logger
from tsieve.timex_corrector import TimexCorrector

logger = get_logger(__name__)


@dataclass
class TaggedTimex:
    """Raw tagger output. Token offsets are 0-based, end exclusive."""
    timex_type: str
    value: Optional[str]
    text: str
    token_begin: int
    token_end: int
    document_function: Optional[str] = None


class TimexTagger(ABC):
    """Interface of the external time tagger."""

    @abstractmethod
    def tag(self, tokens: List[str], document_date: Optional[str]) -> List[TaggedTimex]:
        """Recognize and normalize the time expressions of one tokenized sentence."""
        pass


class TimexMarkup:
    """Adds tagger-produced, corrected time expressions to documents."""

    def __init__(self, tagger: TimexTagger, correct_values: bool = True):
        self.tagger = tagger
        self.correct_values = correct_values
        self.corrector = TimexCorrector()

    def markup(self, doc: SieveDocument) -> int:
        """Tag every sentence of doc. Returns the number of timexes added."""
        creation_time = doc.creation_time()
        document_date = creation_time.value if creation_time else None
        logger.debug(f"{doc.name}: tagging with document date {document_date}")

        next_tid = 1
        added = 0
        for sid, sentence in enumerate(doc.sentences):
            timexes = []
            for tagged in self.tagger.tag(sentence.tokens, document_date):
                timexes.append(self._to_timex(tagged, f"t{next_tid}", sid))
                next_tid += 1

            if self.correct_values:
                self.corrector.correct_timexes(timexes, document_date)

            sentence.timexes.extend(timexes)
            added += len(timexes)

        return added

    @staticmethod
    def _to_timex(tagged: TaggedTimex, tid: str, sid: int) -> Timex:
        try:
            timex_type = TimexType(tagged.timex_type.upper())
        except (AttributeError, ValueError):
            timex_type = None
        return Timex(
            tid=tid,
            timex_type=timex_type,
            text=tagged.text,
            value=tagged.value,
            # Tagger offsets start at 0; Timex spans start at 1.
            span=(tagged.token_begin + 1, tagged.token_end + 1),
            sid=sid,
            document_function=tagged.document_function or None,
        )
