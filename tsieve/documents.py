"""
Document model shared by all sieves.

A SieveDocument is the read view the sieves get of one annotated text:
sentences with their tokens and parse trees, the events and time expressions
anchored in each sentence, the document creation time (DCT) and the temporal
links already established by earlier sieves. Token indices are 1-based
throughout, matching the TimeML convention of the upstream annotation.
"""
import json
from dataclasses import dataclass, field
from enum import StrEnum
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from nltk import Tree

from tsieve.logger import get_logger

logger = get_logger(__name__)


class MultipleCreationTimesError(ValueError):
    """Raised when a document carries more than one creation-time expression."""


# ===| ENUMS |===

class Tense(StrEnum):
    """TimeML tense values of an event instance."""
    PAST = "PAST"
    PRESENT = "PRESENT"
    FUTURE = "FUTURE"
    PASTPART = "PASTPART"
    PRESPART = "PRESPART"
    INFINITIVE = "INFINITIVE"
    NONE = "NONE"

    @classmethod
    def parse(cls, value: Any) -> Optional["Tense"]:
        """Return the tense named by value, or None when it is unknown."""
        return _parse_enum(cls, value)


class Aspect(StrEnum):
    """TimeML aspect values of an event instance."""
    NONE = "NONE"
    PERFECTIVE = "PERFECTIVE"
    PROGRESSIVE = "PROGRESSIVE"
    PERFECTIVE_PROGRESSIVE = "PERFECTIVE_PROGRESSIVE"

    @classmethod
    def parse(cls, value: Any) -> Optional["Aspect"]:
        """Return the aspect named by value, or None when it is unknown."""
        return _parse_enum(cls, value)


class TLinkType(StrEnum):
    """Temporal relation types a link can carry."""
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    IBEFORE = "IBEFORE"
    IAFTER = "IAFTER"
    INCLUDES = "INCLUDES"
    IS_INCLUDED = "IS_INCLUDED"
    BEGINS = "BEGINS"
    BEGUN_BY = "BEGUN_BY"
    ENDS = "ENDS"
    ENDED_BY = "ENDED_BY"
    SIMULTANEOUS = "SIMULTANEOUS"
    DURING = "DURING"
    IDENTITY = "IDENTITY"
    OVERLAP = "OVERLAP"
    VAGUE = "VAGUE"
    NONE = "NONE"


class LinkKind(StrEnum):
    """Which kinds of entities a link connects."""
    EVENT_EVENT = "EVENT_EVENT"
    EVENT_TIME = "EVENT_TIME"
    TIME_TIME = "TIME_TIME"


class TimexType(StrEnum):
    """TIMEX3 types."""
    DATE = "DATE"
    TIME = "TIME"
    DURATION = "DURATION"
    SET = "SET"


CREATION_TIME = "CREATION_TIME"


def _parse_enum(enum_cls, value: Any):
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return None


# ===| DATA CLASSES |===

@dataclass(frozen=True)
class Event:
    """An event instance anchored to one token of one sentence."""
    eid: str
    sid: int
    index: int
    text: str = ""
    tense: Optional[Tense] = None
    aspect: Optional[Aspect] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], sid: Optional[int] = None) -> "Event":
        return cls(
            eid=str(data["eid"]),
            sid=int(data["sid"]) if data.get("sid") is not None else int(sid or 0),
            index=int(data["index"]),
            text=data.get("text", ""),
            tense=Tense.parse(data.get("tense")),
            aspect=Aspect.parse(data.get("aspect")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eid": self.eid,
            "sid": self.sid,
            "index": self.index,
            "text": self.text,
            "tense": self.tense.value if self.tense else None,
            "aspect": self.aspect.value if self.aspect else None,
        }


@dataclass
class Timex:
    """
    A normalized time expression.

    The span is a 1-indexed [start, end) token range within sentence `sid`.
    `value` is the only field a sieve stage may rewrite.
    """
    tid: str
    timex_type: Optional[TimexType]
    text: str
    value: Optional[str]
    span: Optional[Tuple[int, int]] = None
    sid: Optional[int] = None
    document_function: Optional[str] = None

    @property
    def is_creation_time(self) -> bool:
        return (self.document_function or "").upper() == CREATION_TIME

    @classmethod
    def from_dict(cls, data: Dict[str, Any], sid: Optional[int] = None) -> "Timex":
        span = data.get("span")
        # YAML reads an unquoted 20130815 as an int
        value = data.get("value")
        return cls(
            tid=str(data["tid"]),
            timex_type=_parse_enum(TimexType, data.get("type")),
            text=data.get("text", ""),
            value=str(value) if value is not None else None,
            span=(int(span[0]), int(span[1])) if span else None,
            sid=data.get("sid", sid),
            document_function=data.get("function"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tid": self.tid,
            "type": self.timex_type.value if self.timex_type else None,
            "text": self.text,
            "value": self.value,
            "span": list(self.span) if self.span else None,
            "sid": self.sid,
            "function": self.document_function,
        }


@dataclass(frozen=True)
class TLink:
    """A directed temporal relation proposed between two entity ids."""
    source_id: str
    target_id: str
    relation: TLinkType
    kind: LinkKind = LinkKind.EVENT_EVENT
    sieve: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TLink":
        return cls(
            source_id=str(data["source"]),
            target_id=str(data["target"]),
            relation=TLinkType(str(data["relation"]).upper()),
            kind=LinkKind(str(data.get("kind", LinkKind.EVENT_EVENT)).upper()),
            sieve=data.get("sieve"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source_id,
            "target": self.target_id,
            "relation": self.relation.value,
            "kind": self.kind.value,
            "sieve": self.sieve,
        }


@dataclass
class Sentence:
    """One sentence: tokens, an optional PTB-style parse and its anchored mentions."""
    tokens: List[str] = field(default_factory=list)
    parse: Optional[str] = None
    events: List[Event] = field(default_factory=list)
    timexes: List[Timex] = field(default_factory=list)

    @cached_property
    def _pos_tags(self) -> Optional[List[str]]:
        if not self.parse:
            return None
        try:
            tree = Tree.fromstring(self.parse)
        except ValueError as e:
            logger.debug(f"Unreadable parse tree ({e}): {self.parse[:60]}")
            return None
        return [tag for _, tag in tree.pos()]

    def pos_tag(self, index: int) -> Optional[str]:
        """POS tag of the token at a 1-based index, None if it cannot be found."""
        tags = self._pos_tags
        if tags is None or index < 1 or index > len(tags):
            return None
        return tags[index - 1]


@dataclass
class SieveDocument:
    """An annotated document as seen by the sieves."""
    name: str
    sentences: List[Sentence] = field(default_factory=list)
    docstamp: List[Timex] = field(default_factory=list)
    tlinks: List[TLink] = field(default_factory=list)

    def events_by_sentence(self) -> List[List[Event]]:
        return [sentence.events for sentence in self.sentences]

    def events(self) -> List[Event]:
        return [event for sentence in self.sentences for event in sentence.events]

    def timexes(self) -> List[Timex]:
        return [timex for sentence in self.sentences for timex in sentence.timexes]

    def pos_tag(self, event: Event) -> Optional[str]:
        """POS tag of the token an event is anchored to."""
        if event.sid < 0 or event.sid >= len(self.sentences):
            return None
        return self.sentences[event.sid].pos_tag(event.index)

    def creation_time(self) -> Optional[Timex]:
        """
        The document creation time, or None when the document has none.

        Raises MultipleCreationTimesError when more than one is present.
        """
        if len(self.docstamp) > 1:
            raise MultipleCreationTimesError(
                f"Document {self.name} has {len(self.docstamp)} creation times"
            )
        return self.docstamp[0] if self.docstamp else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SieveDocument":
        sentences = []
        for sid, sentence_data in enumerate(data.get("sentences") or []):
            sentences.append(Sentence(
                tokens=list(sentence_data.get("tokens") or []),
                parse=sentence_data.get("parse"),
                events=[Event.from_dict(e, sid) for e in sentence_data.get("events") or []],
                timexes=[Timex.from_dict(t, sid) for t in sentence_data.get("timexes") or []],
            ))

        docstamp = []
        for timex_data in data.get("docstamp") or []:
            timex = Timex.from_dict(timex_data)
            if timex.document_function is None:
                timex.document_function = CREATION_TIME
            docstamp.append(timex)

        return cls(
            name=str(data.get("name", "")),
            sentences=sentences,
            docstamp=docstamp,
            tlinks=[TLink.from_dict(t) for t in data.get("tlinks") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "docstamp": [t.to_dict() for t in self.docstamp],
            "sentences": [
                {
                    "tokens": s.tokens,
                    "parse": s.parse,
                    "events": [e.to_dict() for e in s.events],
                    "timexes": [t.to_dict() for t in s.timexes],
                }
                for s in self.sentences
            ],
            "tlinks": [t.to_dict() for t in self.tlinks],
        }


# ===| LOADING |===

def load_documents(path: Path) -> List[SieveDocument]:
    """Load a corpus of documents from a JSON or YAML file."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if isinstance(data, dict):
        data = data.get("documents") or []
    if not isinstance(data, list):
        raise TypeError(f"Expected a list of documents, got {type(data).__name__}")

    documents = [SieveDocument.from_dict(d) for d in data]
    logger.info(f"Loaded {len(documents)} documents from {path}")
    return documents


def dump_documents(documents: List[SieveDocument], path: Path):
    """Write documents to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump({"documents": [d.to_dict() for d in documents]}, f, indent=2)
