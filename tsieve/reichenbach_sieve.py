"""
Tense/Aspect Sieve

Labels pairs of verb events from their tense and aspect, following the
Reichenbachian tense/aspect mapping of Derczynski and Gaizauskas (2013).

Each event's (tense, aspect) profile is first reduced to the alphabet the
mapping uses. A pair of reduced profiles maps to a disjunction of interval
relations; the table below keeps only the pairs whose disjunction collapses
to exactly one relation in our relation scheme. Every other pair, and every
pair with a feature outside the reduced alphabet, is left undecided.

Two parameters decide which events are assumed to share a temporal context:
  sentence_window           events in the same sentence, or up to N
                            sentences apart, are compared (0 = same sentence)
  require_tense_divergence  pairs whose raw tenses are equal are skipped

Precision observed on TimeBank for the four settings:
  same sentence / same tense          p=0.65  17 of 26
  same or adjacent / same tense       p=0.58  47 of 81
  same sentence / any tense           p=0.57  47 of 82
  same or adjacent / any tense        p=0.53  142 of 270
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from tsieve.documents import Aspect, Event, LinkKind, SieveDocument, TLink, TLinkType, Tense
from tsieve.logger import get_logger
from tsieve.properties import SieveProperties
from tsieve.sieve import Sieve

logger = get_logger(__name__)


# ===| FEATURE NORMALIZER |===

def simplify_tense(tense: Optional[Tense]) -> Optional[Tense]:
    """Collapse participles onto their finite tense; None for anything the mapping ignores."""
    if tense in (Tense.PAST, Tense.PASTPART):
        return Tense.PAST
    if tense in (Tense.PRESENT, Tense.PRESPART):
        return Tense.PRESENT
    if tense == Tense.FUTURE:
        return Tense.FUTURE
    return None


def simplify_aspect(aspect: Optional[Aspect]) -> Optional[Aspect]:
    """
    Reduce aspect to NONE or PERFECTIVE.

    Progressive is dropped: no profile pair containing it maps to a single
    relation, so it never reaches the table.
    """
    if aspect in (Aspect.PERFECTIVE, Aspect.PERFECTIVE_PROGRESSIVE):
        return Aspect.PERFECTIVE
    if aspect == Aspect.NONE:
        return Aspect.NONE
    return None


# ===| RELATION MAPPING TABLE |===

Profile = Tuple[Tense, Aspect]

PAST_NONE: Profile = (Tense.PAST, Aspect.NONE)
PAST_PERF: Profile = (Tense.PAST, Aspect.PERFECTIVE)
PRES_NONE: Profile = (Tense.PRESENT, Aspect.NONE)
PRES_PERF: Profile = (Tense.PRESENT, Aspect.PERFECTIVE)
FUT_NONE: Profile = (Tense.FUTURE, Aspect.NONE)
FUT_PERF: Profile = (Tense.FUTURE, Aspect.PERFECTIVE)

# Not symmetric: each direction was derived on its own.
RELATION_TABLE: Dict[Tuple[Profile, Profile], TLinkType] = {
    (PAST_NONE, PAST_PERF): TLinkType.AFTER,
    (PAST_NONE, FUT_NONE): TLinkType.BEFORE,
    (PAST_NONE, FUT_PERF): TLinkType.BEFORE,

    (PAST_PERF, PAST_NONE): TLinkType.BEFORE,
    (PAST_PERF, PRES_NONE): TLinkType.BEFORE,
    (PAST_PERF, PRES_PERF): TLinkType.BEFORE,
    (PAST_PERF, FUT_NONE): TLinkType.BEFORE,
    (PAST_PERF, FUT_PERF): TLinkType.BEFORE,

    (PRES_NONE, PAST_PERF): TLinkType.AFTER,
    (PRES_NONE, FUT_NONE): TLinkType.BEFORE,

    (PRES_PERF, PAST_PERF): TLinkType.AFTER,
    (PRES_PERF, FUT_NONE): TLinkType.BEFORE,
    (PRES_PERF, FUT_PERF): TLinkType.BEFORE,

    (FUT_NONE, PAST_NONE): TLinkType.AFTER,
    (FUT_NONE, PAST_PERF): TLinkType.AFTER,
    (FUT_NONE, PRES_NONE): TLinkType.AFTER,
    (FUT_NONE, PRES_PERF): TLinkType.AFTER,

    (FUT_PERF, PAST_NONE): TLinkType.AFTER,
    (FUT_PERF, PAST_PERF): TLinkType.AFTER,
    (FUT_PERF, PRES_PERF): TLinkType.AFTER,
}


def simplified_profile(event: Event) -> Optional[Profile]:
    """The reduced (tense, aspect) of an event, or None if either is outside the mapping."""
    tense = simplify_tense(event.tense)
    aspect = simplify_aspect(event.aspect)
    if tense is None or aspect is None:
        return None
    return tense, aspect


def tense_aspect_to_relation(e1: Event, e2: Event) -> Optional[TLinkType]:
    """Relation the mapping assigns to (e1, e2), or None for no decision."""
    p1 = simplified_profile(e1)
    p2 = simplified_profile(e2)
    if p1 is None or p2 is None:
        return None
    return RELATION_TABLE.get((p1, p2))


# ===| CANDIDATE PAIRS |===

class CandidatePairs:
    """
    Ordered event pairs to classify, generated lazily and restartable.

    Every event is paired with each later event of its own sentence, then
    with every event of the next `window` sentences. e1 always precedes e2 in
    document order, so no pair appears twice and no event is paired with
    itself.
    """

    def __init__(self, events_by_sentence: Sequence[Sequence[Event]], window: int = 0):
        if window < 0:
            raise ValueError(f"Sentence window must be non-negative, got {window}")
        self.events_by_sentence = events_by_sentence
        self.window = window

    def __iter__(self) -> Iterator[Tuple[Event, Event]]:
        num_sents = len(self.events_by_sentence)
        for sid in range(num_sents):
            events = self.events_by_sentence[sid]
            for i, e1 in enumerate(events):
                for e2 in events[i + 1:]:
                    yield e1, e2
                # window == 0 leaves this range empty
                for sid2 in range(sid + 1, min(sid + self.window, num_sents - 1) + 1):
                    for e2 in self.events_by_sentence[sid2]:
                        yield e1, e2


# ===| CONFIGURATION |===

@dataclass(frozen=True)
class ReichenbachConfig:
    """Configuration for the Tense/Aspect Sieve."""
    sentence_window: int = 0
    require_tense_divergence: bool = False

    def __post_init__(self):
        if isinstance(self.sentence_window, bool) or not isinstance(self.sentence_window, int):
            raise ValueError(f"sentence_window must be an integer, got {self.sentence_window!r}")
        if self.sentence_window < 0:
            raise ValueError(f"sentence_window must be non-negative, got {self.sentence_window}")
        if not isinstance(self.require_tense_divergence, bool):
            raise ValueError(
                f"require_tense_divergence must be a boolean, got {self.require_tense_divergence!r}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReichenbachConfig":
        """Create from a bare properties section."""
        return cls.from_properties(SieveProperties(data={ReichenbachSieve.NAME: data}))

    @classmethod
    def from_properties(cls, properties: SieveProperties) -> "ReichenbachConfig":
        """Create from properties; missing or empty keys take their defaults."""
        return cls(
            sentence_window=properties.get_int(ReichenbachSieve.NAME, "sentence_window", 0),
            require_tense_divergence=properties.get_bool(
                ReichenbachSieve.NAME, "require_tense_divergence", False
            ),
        )


# ===| SIEVE |===

class ReichenbachSieve(Sieve):
    """Labels verb-verb pairs through the tense/aspect mapping."""

    NAME = "reichenbach"
    VERB_TAG_PREFIX = "VB"

    def __init__(self, config: Optional[ReichenbachConfig] = None):
        self.config = config or ReichenbachConfig()

    @property
    def name(self) -> str:
        return self.NAME

    @classmethod
    def from_properties(cls, properties: SieveProperties) -> "ReichenbachSieve":
        return cls(ReichenbachConfig.from_properties(properties))

    def annotate(self, doc: SieveDocument, current_tlinks: List[TLink]) -> List[TLink]:
        proposed: List[TLink] = []
        candidates = 0

        for e1, e2 in CandidatePairs(doc.events_by_sentence(), self.config.sentence_window):
            candidates += 1
            label = self.get_label(doc, e1, e2)
            if label is None:
                continue
            proposed.append(TLink(e1.eid, e2.eid, label, LinkKind.EVENT_EVENT, sieve=self.NAME))

        logger.debug(f"{doc.name}: {len(proposed)} of {candidates} candidate pairs labeled")
        return proposed

    def get_label(self, doc: SieveDocument, e1: Event, e2: Event) -> Optional[TLinkType]:
        """Apply the verb filter, the tense gate and the mapping to one pair."""
        if not (self.is_verb(doc, e1) and self.is_verb(doc, e2)):
            return None
        if self.config.require_tense_divergence and e1.tense == e2.tense:
            return None
        return tense_aspect_to_relation(e1, e2)

    def is_verb(self, doc: SieveDocument, event: Event) -> bool:
        pos = doc.pos_tag(event)
        return pos is not None and pos.startswith(self.VERB_TAG_PREFIX)
