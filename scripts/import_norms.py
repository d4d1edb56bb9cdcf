"""
CLI usage:
python -m scripts.import_norms <instrument_code> <path_to_csv> <out_yaml> [direction]
CSV columns: variable,min_age,max_age,stratifier,lower,upper,value

Rows become catalog ``ranges`` tables, one band per (variable, min_age,
max_age, stratifier) in file order. An empty ``lower`` or ``upper`` is an
open bound; an empty ``stratifier`` means the table is not stratified. The
output is checked with the same integrity rules the registry applies and is
written only when every table passes; paste its ``tables`` block into the
instrument file.
"""

import csv
import sys
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from neuronorm.core.errors import TableIntegrityError
from neuronorm.engine.catalog import compile_table
from neuronorm.engine.norms.integrity import validate_table

EXPECTED_COLUMNS = ("variable", "min_age", "max_age", "stratifier", "lower", "upper", "value")

_BandKey = Tuple[int, int, Optional[str]]


def _number(text: str) -> Optional[float]:
    text = text.strip()
    if not text:
        return None
    number = float(text)
    return int(number) if number.is_integer() else number


def rows_to_tables(rows: Iterable[Mapping[str, str]], direction: str = "ascending") -> Dict[str, Any]:
    """Group CSV rows into the catalog ``tables`` mapping."""

    grouped: Dict[str, Dict[_BandKey, List[List[Any]]]] = {}
    for line_number, row in enumerate(rows, start=2):
        value = _number(row["value"])
        if value is None:
            raise ValueError(f"line {line_number}: value is required")
        stratifier = row["stratifier"].strip() or None
        key = (int(row["min_age"]), int(row["max_age"]), stratifier)
        bands = grouped.setdefault(row["variable"].strip(), {})
        bands.setdefault(key, []).append([_number(row["lower"]), _number(row["upper"]), value])

    tables: Dict[str, Any] = {}
    for variable, bands in grouped.items():
        compiled_bands = []
        for (min_age, max_age, stratifier), ranges in bands.items():
            band: Dict[str, Any] = {"ages": [min_age, max_age]}
            if stratifier is not None:
                band["stratifier"] = stratifier
            band["ranges"] = ranges
            compiled_bands.append(band)
        tables[variable] = {"direction": direction, "bands": compiled_bands}
    return tables


def validate_tables(instrument_code: str, tables: Mapping[str, Any]) -> None:
    """Compile and check every table; raises ``TableIntegrityError`` on the first problem."""

    for variable, payload in tables.items():
        stratifiers = {band["stratifier"] for band in payload["bands"] if "stratifier" in band}
        table = compile_table(instrument_code, variable, payload, stratified=bool(stratifiers))
        validate_table(table, stratifier_values=sorted(stratifiers))


def main():
    if len(sys.argv) not in (4, 5):
        print("Usage: python -m scripts.import_norms <instrument_code> <csv_path> <out_yaml> [direction]")
        sys.exit(1)
    instrument_code, path, out_path = sys.argv[1], sys.argv[2], sys.argv[3]
    direction = sys.argv[4] if len(sys.argv) == 5 else "ascending"
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or tuple(reader.fieldnames) != EXPECTED_COLUMNS:
            print("CSV header must be: " + ",".join(EXPECTED_COLUMNS))
            sys.exit(2)
        rows = list(reader)
    tables = rows_to_tables(rows, direction=direction)
    try:
        validate_tables(instrument_code, tables)
    except TableIntegrityError as exc:
        print(f"Rejected: {exc.message}")
        sys.exit(3)
    with open(out_path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"tables": tables}, f, allow_unicode=True, sort_keys=False, default_flow_style=None)
    print(f"Imported {len(rows)} rows into {len(tables)} tables for instrument={instrument_code}")


if __name__ == "__main__":
    main()
