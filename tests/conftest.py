from typing import List, Optional, Sequence, Tuple

import pytest

from tsieve.documents import (
    CREATION_TIME,
    Aspect,
    Event,
    Sentence,
    SieveDocument,
    Tense,
    Timex,
    TimexType,
)


def parse_from_tags(tagged: Sequence[Tuple[str, str]]) -> str:
    """Flat PTB tree over (token, tag) pairs."""
    leaves = " ".join(f"({tag} {token})" for token, tag in tagged)
    return f"(ROOT (S {leaves}))"


@pytest.fixture
def make_event():
    def _make(eid: str, sid: int, index: int, tense=Tense.PAST, aspect=Aspect.NONE) -> Event:
        return Event(eid=eid, sid=sid, index=index, text=eid, tense=tense, aspect=aspect)
    return _make


@pytest.fixture
def make_sentence():
    def _make(tagged: Sequence[Tuple[str, str]], events: Optional[List[Event]] = None,
              timexes: Optional[List[Timex]] = None) -> Sentence:
        return Sentence(
            tokens=[token for token, _ in tagged],
            parse=parse_from_tags(tagged),
            events=list(events or []),
            timexes=list(timexes or []),
        )
    return _make


@pytest.fixture
def make_dct():
    def _make(value: str = "20130815", tid: str = "t0") -> Timex:
        return Timex(
            tid=tid,
            timex_type=TimexType.DATE,
            text="August 15, 2013",
            value=value,
            document_function=CREATION_TIME,
        )
    return _make


@pytest.fixture
def make_timex():
    def _make(tid: str, text: str, value: Optional[str], sid: int = 0) -> Timex:
        return Timex(tid=tid, timex_type=TimexType.DATE, text=text, value=value, span=(1, 2), sid=sid)
    return _make


@pytest.fixture
def two_verb_document(make_event, make_sentence):
    """One sentence, 'He had left when she arrived': a past perfect and a simple past verb."""
    e1 = make_event("e1", 0, 3, Tense.PAST, Aspect.PERFECTIVE)
    e2 = make_event("e2", 0, 6, Tense.PAST, Aspect.NONE)
    sentence = make_sentence(
        [("He", "PRP"), ("had", "VBD"), ("left", "VBN"), ("when", "WRB"), ("she", "PRP"), ("arrived", "VBD")],
        events=[e1, e2],
    )
    return SieveDocument(name="two_verbs", sentences=[sentence])
