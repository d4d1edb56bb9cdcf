import pytest

from neuronorm.core.sentinels import NOT_AVAILABLE
from neuronorm.engine.classification import bands_for
from neuronorm.engine.norms.value_objects import TableDirection

EXPECTED_CODES = (
    "BPA2", "FDT", "RAVLT", "FVA", "BNTBR", "PCFO", "TSBC", "TRILHAS_PRE_ESCOLAR",
    "TMT_ADULTO", "HAYLING_ADULTO", "HAYLING_INFANTIL", "FAS",
)

SAMPLE_RAWS = [step / 2 for step in range(-20, 401)]


def test_packaged_catalog_registers_every_instrument(registry):
    assert registry.codes() == EXPECTED_CODES
    assert registry.catalog_version
    expected_tables = sum(len(definition.scored_variables) for definition in registry)
    assert len(registry.store) == expected_tables


@pytest.mark.parametrize("code", EXPECTED_CODES)
def test_scoring_is_total_within_domain(engine, registry, code):
    definition = registry.get(code)
    stratifiers = definition.stratifier.values if definition.stratifier else (None,)
    labels = {band.label for band in bands_for(definition.banding_scheme)}
    for fill in ("zero", "max"):
        raw = {
            spec.name: (spec.maximum if fill == "max" and spec.maximum is not None else 0)
            for spec in definition.fields
        }
        for age in range(definition.min_age, definition.max_age + 1):
            for stratifier in stratifiers:
                result = engine.score(code, age, raw, stratifier_value=stratifier)
                assert tuple(result.normative_scores) == definition.scored_variables
                for variable in definition.scored_variables:
                    label = result.classifications[variable]
                    assert label is NOT_AVAILABLE or label in labels


@pytest.mark.parametrize("code", EXPECTED_CODES)
def test_norms_are_monotonic_in_raw_score(registry, code):
    definition = registry.get(code)
    for variable, table in definition.tables.items():
        for band in table.bands:
            values = [cell.value for cell in map(band.find_range, SAMPLE_RAWS) if cell is not None]
            assert values, f"{table.context()}[{band.describe()}] matched no sample"
            pairs = list(zip(values, values[1:]))
            if table.direction is TableDirection.ASCENDING:
                assert all(left <= right for left, right in pairs), f"{table.context()}[{band.describe()}]"
            else:
                assert all(left >= right for left, right in pairs), f"{table.context()}[{band.describe()}]"


@pytest.mark.parametrize("code", ["FDT", "TMT_ADULTO", "HAYLING_ADULTO", "HAYLING_INFANTIL"])
def test_timed_tables_run_descending(registry, code):
    definition = registry.get(code)
    assert {table.direction for table in definition.tables.values()} == {TableDirection.DESCENDING}


def test_out_of_order_published_cells_are_not_available(registry):
    store = registry.store
    assert store.lookup("PCFO", "ACERTOS", 12, 11, "fundamental") is NOT_AVAILABLE
    assert store.lookup("PCFO", "ACERTOS", 12, 12, "fundamental") == 1
    assert store.lookup("TSBC", "OD", 8, 1, "publica") is NOT_AVAILABLE
    assert store.lookup("TSBC", "OD", 8, 2, "publica") is NOT_AVAILABLE
    assert store.lookup("TSBC", "OD", 8, 3, "publica") == 63


@pytest.mark.parametrize(
    "code,variable,age,raw,stratifier,expected",
    [
        ("RAVLT", "A1", 7, 4, None, 50),
        ("RAVLT", "A1", 7, 0, None, 1),
        ("FDT", "LEITURA", 7, 49, None, 1),
        ("FVA", "FRUTAS", 20, 17, None, 62),
        ("TSBC", "OI", 4, 1, "publica", 106),
        ("TRILHAS_PRE_ESCOLAR", "SEQ_A", 5, 3, None, 95),
        ("TRILHAS_PRE_ESCOLAR", "SEQ_B", 6, 10, None, 136),
        ("TMT_ADULTO", "TEMPO_A", 30, 17.36, "superior", 99),
        ("TMT_ADULTO", "TEMPO_A", 30, 17.37, "superior", 90),
        ("TMT_ADULTO", "TEMPO_B", 65, 180.36, "superior", 5),
        ("TMT_ADULTO", "TEMPO_BA", 50, 48.13, "superior", 50),
        ("HAYLING_ADULTO", "TEMPO_A", 30, 14.79, "superior", 50),
        ("HAYLING_ADULTO", "ERROS_B", 50, 17.17, "fundamental", 50),
        ("HAYLING_ADULTO", "ERROS_B", 50, 46, "fundamental", NOT_AVAILABLE),
        ("HAYLING_INFANTIL", "ERROS_B", 10, 4, "privada", 50),
        ("HAYLING_INFANTIL", "TEMPO_B", 12, 57.5, "publica", 2),
        ("FAS", "TOTAL", 19, 44, None, 52),
    ],
)
def test_published_values(registry, code, variable, age, raw, stratifier, expected):
    assert registry.store.lookup(code, variable, age, raw, stratifier) == expected
