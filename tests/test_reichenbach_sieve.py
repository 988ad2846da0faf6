import itertools

import pytest

from tsieve.documents import Aspect, Event, LinkKind, SieveDocument, TLinkType, Tense
from tsieve.properties import SieveProperties
from tsieve.reichenbach_sieve import (
    RELATION_TABLE,
    CandidatePairs,
    ReichenbachConfig,
    ReichenbachSieve,
    simplify_aspect,
    simplify_tense,
    tense_aspect_to_relation,
)

P, PR, F = Tense.PAST, Tense.PRESENT, Tense.FUTURE
N, PF = Aspect.NONE, Aspect.PERFECTIVE

EXPECTED_TABLE = {
    ((P, N), (P, PF)): TLinkType.AFTER,
    ((P, N), (F, N)): TLinkType.BEFORE,
    ((P, N), (F, PF)): TLinkType.BEFORE,
    ((P, PF), (P, N)): TLinkType.BEFORE,
    ((P, PF), (PR, N)): TLinkType.BEFORE,
    ((P, PF), (PR, PF)): TLinkType.BEFORE,
    ((P, PF), (F, N)): TLinkType.BEFORE,
    ((P, PF), (F, PF)): TLinkType.BEFORE,
    ((PR, N), (P, PF)): TLinkType.AFTER,
    ((PR, N), (F, N)): TLinkType.BEFORE,
    ((PR, PF), (P, PF)): TLinkType.AFTER,
    ((PR, PF), (F, N)): TLinkType.BEFORE,
    ((PR, PF), (F, PF)): TLinkType.BEFORE,
    ((F, N), (P, N)): TLinkType.AFTER,
    ((F, N), (P, PF)): TLinkType.AFTER,
    ((F, N), (PR, N)): TLinkType.AFTER,
    ((F, N), (PR, PF)): TLinkType.AFTER,
    ((F, PF), (P, N)): TLinkType.AFTER,
    ((F, PF), (P, PF)): TLinkType.AFTER,
    ((F, PF), (PR, PF)): TLinkType.AFTER,
}

ALL_TENSES = list(Tense) + [None]
ALL_ASPECTS = list(Aspect) + [None]


def _event(eid, tense, aspect, sid=0, index=1):
    return Event(eid=eid, sid=sid, index=index, tense=tense, aspect=aspect)


# ===| feature normalizer |===

@pytest.mark.parametrize("tense,expected", [
    (Tense.PAST, Tense.PAST),
    (Tense.PASTPART, Tense.PAST),
    (Tense.PRESENT, Tense.PRESENT),
    (Tense.PRESPART, Tense.PRESENT),
    (Tense.FUTURE, Tense.FUTURE),
    (Tense.INFINITIVE, None),
    (Tense.NONE, None),
    (None, None),
])
def test_simplify_tense(tense, expected):
    assert simplify_tense(tense) == expected


@pytest.mark.parametrize("aspect,expected", [
    (Aspect.NONE, Aspect.NONE),
    (Aspect.PERFECTIVE, Aspect.PERFECTIVE),
    (Aspect.PERFECTIVE_PROGRESSIVE, Aspect.PERFECTIVE),
    (Aspect.PROGRESSIVE, None),
    (None, None),
])
def test_simplify_aspect(aspect, expected):
    assert simplify_aspect(aspect) == expected


# ===| mapping table |===

def test_table_matches_enumeration_entry_for_entry():
    assert RELATION_TABLE == EXPECTED_TABLE


def test_table_is_not_symmetric():
    assert RELATION_TABLE[((P, N), (P, PF))] == TLinkType.AFTER
    assert RELATION_TABLE[((P, PF), (P, N))] == TLinkType.BEFORE
    assert ((F, N), (P, N)) in RELATION_TABLE
    assert ((P, N), (F, N)) in RELATION_TABLE
    assert ((PR, N), (P, N)) not in RELATION_TABLE
    assert ((F, PF), (PR, N)) not in RELATION_TABLE


def test_every_combination_outside_table_is_undecided():
    for t1, a1, t2, a2 in itertools.product(ALL_TENSES, ALL_ASPECTS, ALL_TENSES, ALL_ASPECTS):
        relation = tense_aspect_to_relation(_event("e1", t1, a1), _event("e2", t2, a2))
        s1 = (simplify_tense(t1), simplify_aspect(a1))
        s2 = (simplify_tense(t2), simplify_aspect(a2))
        if None in s1 or None in s2:
            assert relation is None
        else:
            assert relation == EXPECTED_TABLE.get((s1, s2))


def test_participles_and_perfect_progressive_reach_the_table():
    e1 = _event("e1", Tense.PASTPART, Aspect.PERFECTIVE_PROGRESSIVE)
    e2 = _event("e2", Tense.PRESPART, Aspect.NONE)
    assert tense_aspect_to_relation(e1, e2) == TLinkType.BEFORE


def test_progressive_is_undecided():
    e1 = _event("e1", Tense.FUTURE, Aspect.PROGRESSIVE)
    e2 = _event("e2", Tense.PAST, Aspect.NONE)
    assert tense_aspect_to_relation(e1, e2) is None


# ===| candidate pairs |===

def _sentences(*sizes):
    counter = itertools.count()
    return [[_event(f"e{next(counter)}", P, N, sid=sid) for _ in range(size)] for sid, size in enumerate(sizes)]


def test_window_zero_pairs_within_sentences_only():
    pairs = list(CandidatePairs(_sentences(2, 3), window=0))
    assert len(pairs) == 4
    assert all(e1.sid == e2.sid for e1, e2 in pairs)


def test_window_one_reaches_only_the_next_sentence():
    pairs = [(e1.eid, e2.eid) for e1, e2 in CandidatePairs(_sentences(1, 1, 1), window=1)]
    assert pairs == [("e0", "e1"), ("e1", "e2")]


def test_window_two_reaches_two_sentences():
    pairs = [(e1.eid, e2.eid) for e1, e2 in CandidatePairs(_sentences(1, 1, 1), window=2)]
    assert pairs == [("e0", "e1"), ("e0", "e2"), ("e1", "e2")]


def test_window_larger_than_document():
    pairs = list(CandidatePairs(_sentences(2, 1), window=10))
    assert len(pairs) == 3


def test_no_self_pairs_and_no_reversed_duplicates():
    pairs = [(e1.eid, e2.eid) for e1, e2 in CandidatePairs(_sentences(3, 0, 2, 4, 1), window=2)]
    assert all(a != b for a, b in pairs)
    unordered = {frozenset(p) for p in pairs}
    assert len(unordered) == len(pairs)


def test_pairs_are_in_document_order():
    for e1, e2 in CandidatePairs(_sentences(2, 2, 2), window=1):
        assert (e1.sid, int(e1.eid[1:])) < (e2.sid, int(e2.eid[1:]))


def test_candidate_pairs_are_restartable():
    candidates = CandidatePairs(_sentences(2, 2), window=1)
    assert list(candidates) == list(candidates)


def test_negative_window_rejected():
    with pytest.raises(ValueError):
        CandidatePairs(_sentences(1), window=-1)


# ===| sieve |===

def test_labels_verb_pair(two_verb_document):
    tlinks = ReichenbachSieve().annotate(two_verb_document, [])
    assert len(tlinks) == 1
    link = tlinks[0]
    assert (link.source_id, link.target_id, link.relation) == ("e1", "e2", TLinkType.BEFORE)
    assert link.kind == LinkKind.EVENT_EVENT
    assert link.sieve == "reichenbach"


@pytest.mark.parametrize("profiles,relation", list(EXPECTED_TABLE.items()))
@pytest.mark.parametrize("tags", [("NN", "VBD"), ("VBD", "NN"), ("NN", "NNS")])
def test_non_verb_pair_is_never_labeled(make_event, make_sentence, profiles, relation, tags):
    (t1, a1), (t2, a2) = profiles
    e1 = make_event("e1", 0, 1, t1, a1)
    e2 = make_event("e2", 0, 2, t2, a2)
    verbs = make_sentence([("x", "VBD"), ("y", "VBD")], events=[e1, e2])
    mixed = make_sentence([("x", tags[0]), ("y", tags[1])], events=[e1, e2])

    sieve = ReichenbachSieve()
    assert [t.relation for t in sieve.annotate(SieveDocument(name="verbs", sentences=[verbs]), [])] == [relation]
    assert sieve.annotate(SieveDocument(name="mixed", sentences=[mixed]), []) == []


def test_missing_parse_is_no_decision(two_verb_document):
    two_verb_document.sentences[0].parse = None
    assert ReichenbachSieve().annotate(two_verb_document, []) == []


def test_same_tense_gate_discards_equal_tenses(two_verb_document):
    sieve = ReichenbachSieve(ReichenbachConfig(require_tense_divergence=True))
    assert sieve.annotate(two_verb_document, []) == []


def test_same_tense_gate_keeps_divergent_tenses(make_event, make_sentence):
    e1 = make_event("e1", 0, 2, Tense.FUTURE, Aspect.NONE)
    e2 = make_event("e2", 0, 4, Tense.PRESENT, Aspect.NONE)
    sentence = make_sentence(
        [("will", "MD"), ("go", "VB"), ("she", "PRP"), ("says", "VBZ")],
        events=[e1, e2],
    )
    doc = SieveDocument(name="divergent", sentences=[sentence])
    sieve = ReichenbachSieve(ReichenbachConfig(require_tense_divergence=True))
    tlinks = sieve.annotate(doc, [])
    assert [t.relation for t in tlinks] == [TLinkType.AFTER]


def test_cross_sentence_pairs_follow_the_window(make_event, make_sentence):
    e1 = make_event("e1", 0, 2, Tense.PAST, Aspect.PERFECTIVE)
    e2 = make_event("e2", 1, 2, Tense.FUTURE, Aspect.NONE)
    doc = SieveDocument(name="window", sentences=[
        make_sentence([("He", "PRP"), ("resigned", "VBD")], events=[e1]),
        make_sentence([("She", "PRP"), ("succeed", "VB")], events=[e2]),
    ])
    assert ReichenbachSieve(ReichenbachConfig(sentence_window=0)).annotate(doc, []) == []
    tlinks = ReichenbachSieve(ReichenbachConfig(sentence_window=1)).annotate(doc, [])
    assert [(t.source_id, t.target_id, t.relation) for t in tlinks] == [("e1", "e2", TLinkType.BEFORE)]


def test_annotate_leaves_document_untouched(two_verb_document):
    before = two_verb_document.to_dict()
    ReichenbachSieve(ReichenbachConfig(sentence_window=2)).annotate(two_verb_document, [])
    assert two_verb_document.to_dict() == before


def test_train_is_a_no_op(two_verb_document):
    sieve = ReichenbachSieve()
    assert sieve.train([two_verb_document]) is None
    assert len(sieve.annotate(two_verb_document, [])) == 1


# ===| configuration |===

def test_config_defaults():
    config = ReichenbachConfig.from_dict({})
    assert config.sentence_window == 0
    assert config.require_tense_divergence is False


def test_config_empty_keys_take_defaults():
    config = ReichenbachConfig.from_dict({"sentence_window": None, "require_tense_divergence": None})
    assert config == ReichenbachConfig()


def test_config_from_yaml_with_empty_keys(tmp_path):
    path = tmp_path / "sieves.yaml"
    path.write_text("reichenbach:\n  sentence_window:\n  require_tense_divergence:\n", encoding="utf-8")
    assert ReichenbachSieve.from_properties(SieveProperties.from_yaml(path)).config == ReichenbachConfig()


def test_config_accepts_integral_float():
    assert ReichenbachConfig.from_dict({"sentence_window": 2.0}).sentence_window == 2


def test_config_from_properties():
    properties = SieveProperties(data={
        "reichenbach": {"sentence_window": "1", "require_tense_divergence": "true"}
    })
    sieve = ReichenbachSieve.from_properties(properties)
    assert sieve.config == ReichenbachConfig(sentence_window=1, require_tense_divergence=True)


@pytest.mark.parametrize("data", [
    {"sentence_window": -1},
    {"sentence_window": "two"},
    {"sentence_window": True},
    {"sentence_window": 2.7},
    {"require_tense_divergence": "maybe"},
])
def test_config_rejects_invalid_values(data):
    with pytest.raises(ValueError):
        ReichenbachConfig.from_dict(data)
