"""Majority-class baseline for event-DCT pairs: every event happens BEFORE the creation time."""
from typing import List

from tsieve.documents import LinkKind, SieveDocument, TLink, TLinkType
from tsieve.logger import get_logger
from tsieve.sieve import Sieve

logger = get_logger(__name__)


class BaselineEventDCTSieve(Sieve):
    """Labels every event BEFORE the document creation time."""

    NAME = "baseline_event_dct"

    @property
    def name(self) -> str:
        return self.NAME

    def annotate(self, doc: SieveDocument, current_tlinks: List[TLink]) -> List[TLink]:
        creation_time = doc.creation_time()
        if creation_time is None:
            logger.debug(f"{doc.name}: no creation time, nothing to propose")
            return []

        return [
            TLink(event.eid, creation_time.tid, TLinkType.BEFORE, LinkKind.EVENT_TIME, sieve=self.NAME)
            for event in doc.events()
        ]
