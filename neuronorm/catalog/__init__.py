"""Packaged normative reference data.

One YAML file per instrument, listed in load order by ``manifest.yaml``.
"""

from pathlib import Path

CATALOG_DIR = Path(__file__).resolve().parent

__all__ = ["CATALOG_DIR"]
