import pytest

from neuronorm.core.numeric import safe_round
from neuronorm.instruments import bntbr, bpa2, fas, fdt, fva, hayling, pcfo, ravlt, tmt_adulto, trilhas_pre_escolar, tsbc


def test_bpa2_subtask_is_hits_minus_errors_and_omissions():
    assert bpa2.subtask_score(20, 3, 2) == 15


def test_bpa2_general_attention_sums_subtasks():
    raw = {
        "ac_acertos": 20, "ac_erros": 3, "ac_omissoes": 2,
        "ad_acertos": 30, "ad_erros": 5, "ad_omissoes": 0,
        "aa_acertos": 10, "aa_erros": 6, "aa_omissoes": 8,
    }
    scores = bpa2.derive(raw, 30)
    assert scores == {"AC": 15, "AD": 25, "AA": -4, "AG": 36}


def test_fdt_contrasts_subtract_reading_time():
    raw = {"leitura": 30.5, "contagem": 35.0, "escolha": 52.25, "alternancia": 60.0}
    scores = fdt.derive(raw, 10)
    assert scores["INIBICAO"] == pytest.approx(21.75)
    assert scores["FLEXIBILIDADE"] == pytest.approx(29.5)
    assert scores["LEITURA"] == 30.5


def test_ravlt_totals_and_indices():
    raw = {"a1": 5, "a2": 7, "a3": 9, "a4": 10, "a5": 12, "b1": 4, "a6": 9, "a7": 8, "rec": 45}
    scores = ravlt.derive(raw, 25)
    assert scores["ESCORE_TOTAL"] == 43
    assert scores["RECONHECIMENTO"] == 10
    assert scores["ALT"] == 18
    assert scores["VE"] == pytest.approx(0.89)
    assert scores["IP"] == pytest.approx(0.8)
    assert scores["IR"] == pytest.approx(0.75)


def test_ravlt_ratio_with_zero_denominator_is_zero():
    raw = {"a1": 0, "a2": 0, "a3": 0, "a4": 0, "a5": 0, "b1": 3, "a6": 0, "a7": 2, "rec": 35}
    scores = ravlt.derive(raw, 25)
    assert scores["VE"] == 0.0
    assert scores["IP"] == 0.0
    assert scores["IR"] == 0.0
    assert scores["RECONHECIMENTO"] == 0


def test_ravlt_ratio_rounds_half_up():
    assert ravlt.ratio(1, 8) == 0.13
    assert ravlt.ratio(2, 3) == 0.67


@pytest.mark.parametrize(
    "value,decimals,expected",
    [(0.665, 2, 0.67), (2.5, 0, 3.0), (3.5, 0, 4.0), (-2.5, 0, -3.0), (44.730000000000004, 2, 44.73)],
)
def test_safe_round_is_half_up(value, decimals, expected):
    assert safe_round(value, decimals) == expected


def test_tmt_contrast_is_part_b_minus_part_a():
    scores = tmt_adulto.derive({"tempo_a": 17.36, "tempo_b": 62.09}, 30)
    assert scores == {"TEMPO_A": 17.36, "TEMPO_B": 62.09, "TEMPO_BA": 44.73}


def test_hayling_inhibition_may_be_negative():
    scores = hayling.derive({"tempo_a": 30, "tempo_b": 20.5, "erros_b": 3}, 8)
    assert scores == {"TEMPO_A": 30, "TEMPO_B": 20.5, "ERROS_B": 3, "INIBICAO_BA": -9.5}


def test_fas_total_sums_letters():
    scores = fas.derive({"letra_f": 12, "letra_a": 9, "letra_s": 14}, 40)
    assert scores["TOTAL"] == 35
    assert (scores["LETRA_F"], scores["LETRA_A"], scores["LETRA_S"]) == (12, 9, 14)


@pytest.mark.parametrize(
    "module,raw,expected",
    [
        (fva, {"animais": 14, "frutas": 9, "pares": 7}, {"ANIMAIS": 14, "FRUTAS": 9, "PARES": 7}),
        (bntbr, {"acertos": 22}, {"ACERTOS": 22}),
        (pcfo, {"acertos": 17}, {"ACERTOS": 17}),
        (tsbc, {"ordem_direta": 5, "ordem_inversa": 3}, {"OD": 5, "OI": 3}),
        (trilhas_pre_escolar, {"sequencias_a": 3, "sequencias_b": 6}, {"SEQ_A": 3, "SEQ_B": 6}),
    ],
)
def test_count_instruments_pass_through(module, raw, expected):
    assert module.derive(raw, 8) == expected


def test_derivations_ignore_extra_fields():
    assert bntbr.derive({"acertos": 10, "observacao": 1}, 40) == {"ACERTOS": 10}
