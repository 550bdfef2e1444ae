"""Numeric field decoding for Qucs schematics: unit suffixes and defaults."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

logger = logging.getLogger(__name__)

_SCIENTIFIC = re.compile(r"^[eE](-?|\+?)([0-9]*)$")
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")

# Engineering prefixes as powers of ten.
_PREFIXES = {
    "E": 18,
    "P": 15,
    "T": 12,
    "G": 9,
    "M": 6,
    "k": 3,
    "m": -3,
    "u": -6,
    "n": -9,
    "p": -12,
    "f": -15,
    "a": -18,
}
_UNITS = ("", "m", "Hz", "Ohm", "dBm")
_PLAIN_UNITS = ("", "Hz", "Ohm", "dBm")


def _scale(multiplier: float, exponent: int) -> float:
    if exponent >= 0:
        return multiplier * 10**exponent
    return multiplier / 10**-exponent


def _engineering_exponent(s_eng: str) -> int:
    if s_eng in _PLAIN_UNITS:
        return 0
    prefix, unit = s_eng[:1], s_eng[1:]
    if prefix in _PREFIXES and unit in _UNITS:
        return _PREFIXES[prefix]
    return 0


def _leading_float(text: str) -> float:
    """Parse the number at the start of ``text``, ignoring what follows it."""
    match = _LEADING_NUMBER.match(text)
    if match is None:
        raise ValueError(f"no number in {text!r}")
    return float(match.group(0))


def suffix_multiplier(s_sci: str, s_eng: str, is_length: bool) -> float:
    """Return the multiplier for a scientific and an engineering suffix.

    Lengths are expressed in millimetres, so they get an extra factor 1000.
    """
    multiplier = 1.0
    if s_sci:
        match = _SCIENTIFIC.search(s_sci)
        sign, digits = (match.group(1), match.group(2)) if match else ("", "")
        if not digits:
            raise ValueError(f"invalid exponent {s_sci!r}")
        exponent = int(digits)
        multiplier = _scale(multiplier, -exponent if sign == "-" else exponent)

    multiplier = _scale(multiplier, _engineering_exponent(s_eng))

    if is_length:
        multiplier *= 1000
    return multiplier


def check_void(value: str, label: str = "") -> str:
    """Return ``value``, or ``"0"`` when it is empty (warning if a label is given)."""
    if value:
        return value
    if label:
        logger.warning("Void field in component %s -> Assigned to 0", label)
    return "0"


def mstub_shift(is_x: bool, value: str, rotation: str) -> str:
    """Shift an MSTUB wire point by 10 grid units to match an MRSTUB one."""
    shifts = {"0": (-10, 0), "1": (0, -10), "2": (10, 0), "3": (0, 10)}
    if rotation not in shifts:
        return value
    dx, dy = shifts[rotation]
    delta = dx if is_x else dy
    if delta == 0:
        return value
    return str(int(value) + delta)


def process_field(
    variables: Mapping[str, float],
    variable: str,
    value: str,
    s_sci: str,
    s_eng: str,
    label: str,
    is_length: bool,
) -> float:
    """Evaluate a component field, either from a variable or a literal value."""
    if variable:
        if variable in variables:
            return variables[variable] * (1000 if is_length else 1)
        logger.warning(
            "Variable not found in component %s : %s -> Assigned to 0. "
            "Try to start a simulation.",
            label,
            variable,
        )
        return 0.0
    return _leading_float(check_void(value, label)) * suffix_multiplier(
        s_sci, s_eng, is_length
    )