from concurrent.futures import ThreadPoolExecutor

import pytest

from neuronorm.core.errors import InvalidInputError
from neuronorm.core.metrics import get_counters, metrics_registry
from neuronorm.engine import recompute, registry
from neuronorm.engine.recompute import RecomputeController


@pytest.fixture()
def controller(engine):
    metrics_registry.reset()
    return RecomputeController(engine)


def test_sequences_increase_per_subject_and_instrument(controller):
    assert controller.begin("BNTBR", "s1").sequence == 1
    assert controller.begin("BNTBR", "s1").sequence == 2
    assert controller.begin("BNTBR", "s2").sequence == 1
    assert controller.begin("FVA", "s1").sequence == 1


def test_late_arrival_of_older_call_is_discarded(controller, engine):
    older = controller.begin("BNTBR", "s1")
    newer = controller.begin("BNTBR", "s1")
    newer_result = engine.score("BNTBR", 30, {"acertos": 25})
    older_result = engine.score("BNTBR", 30, {"acertos": 10})

    applied = controller.submit(newer, result=newer_result)
    stale = controller.submit(older, result=older_result)

    assert applied.applied
    assert not stale.applied
    assert controller.latest("BNTBR", "s1").result is newer_result
    assert get_counters()["recompute.stale_discarded"] == 1


def test_in_order_arrival_applies_each_outcome(controller, engine):
    first = controller.begin("BNTBR", "s1")
    controller.submit(first, result=engine.score("BNTBR", 30, {"acertos": 10}))
    second = controller.begin("BNTBR", "s1")
    final = engine.score("BNTBR", 30, {"acertos": 25})
    assert controller.submit(second, result=final).applied
    assert controller.latest("BNTBR", "s1").sequence == 2


def test_errors_follow_the_same_rule(controller, engine):
    older = controller.begin("BNTBR", "s1")
    newer = controller.begin("BNTBR", "s1")
    result = engine.score("BNTBR", 30, {"acertos": 25})
    controller.submit(newer, error=InvalidInputError("campo inválido", field="acertos", value=-1))
    assert not controller.submit(older, result=result).applied
    latest = controller.latest("BNTBR", "s1")
    assert not latest.ok
    assert latest.error.field == "acertos"


def test_recompute_captures_scoring_errors(controller):
    outcome = controller.recompute("s1", "BNTBR", 30, {"acertos": -1})
    assert outcome.applied
    assert isinstance(outcome.error, InvalidInputError)
    assert outcome.result is None
    recovered = controller.recompute("s1", "BNTBR", 30, {"acertos": 22})
    assert recovered.ok
    assert recovered.sequence == 2
    assert controller.latest("BNTBR", "s1").result.normative_scores["ACERTOS"] == 50


def test_submit_requires_exactly_one_outcome(controller):
    ticket = controller.begin("BNTBR", "s1")
    with pytest.raises(ValueError) as exc:
        controller.submit(ticket)
    assert "Exactly one" in str(exc.value)


def test_latest_is_none_before_any_outcome(controller):
    assert controller.latest("BNTBR", "nobody") is None


def test_forget_keeps_sequence_counter(controller):
    controller.recompute("s1", "BNTBR", 30, {"acertos": 22})
    controller.forget("BNTBR", "s1")
    assert controller.latest("BNTBR", "s1") is None
    assert controller.begin("BNTBR", "s1").sequence == 2


def test_concurrent_edits_keep_highest_sequence(controller):
    raws = [{"acertos": value} for value in range(0, 31)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(lambda raw: controller.recompute("s1", "BNTBR", 30, raw), raws))
    latest = controller.latest("BNTBR", "s1")
    assert latest.sequence == len(raws)
    assert latest.sequence == max(outcome.sequence for outcome in outcomes)
    applied_sequences = [outcome.sequence for outcome in outcomes if outcome.applied]
    assert len(raws) in applied_sequences


@pytest.mark.parametrize("module,opening", [(recompute, "Sequence-numbered recompute"), (registry, "Instrument registry")])
def test_module_docstrings_are_exposed(module, opening):
    assert module.__doc__ is not None
    assert module.__doc__.startswith(opening)
