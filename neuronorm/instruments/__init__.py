"""Derivation library: one pure ``derive(raw, age)`` function per instrument.

Each function receives already-validated raw inputs (see
``neuronorm.engine.validation``) and returns every scored and auxiliary
variable the catalog declares for its instrument. Functions never look at
norms and never raise on valid input; the age argument is part of the
contract so a derivation may depend on it, although none of the current
instruments does.
"""
