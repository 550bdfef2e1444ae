"""Command-line port overrides: shifting and resizing of Pac ports."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from qucsrfl.units import process_field

logger = logging.getLogger(__name__)

# g1 value    g2 suffix    g3 scientific    g4 engineer
_SIGNED = re.compile(
    r"((?:-?|\+?)[0-9.]*)(([eE]-?[0-9]+)? ?([EPTGMkmunpfa]?(?:m?|(?:Hz)|(?:Ohm)?|(?:dBm)?))?)"
)
_UNSIGNED = re.compile(
    r"(\+?[0-9.]*)(([eE]-?[0-9]+)? ?([EPTGMkmunpfa]?(?:m?|(?:Hz)|(?:Ohm)?|(?:dBm)?))?)"
)


@dataclass(frozen=True)
class PortArg:
    """A port override: the port number and two raw length values.

    For a shift the values are the X and Y offsets, for a size they are
    the length and the width.
    """

    port: int
    first: str
    second: str


def parse_port_value(text: str, allow_negative: bool) -> float:
    """Parse a length given on the command line into millimetres."""
    pattern = _SIGNED if allow_negative else _UNSIGNED
    match = pattern.search(text)
    value, s_sci, s_eng = (
        (match.group(1), match.group(3) or "", match.group(4) or "")
        if match
        else ("", "", "")
    )
    return process_field({}, "", value, s_sci, s_eng, "", True)


def _find_port(components: Iterable[Any], port: int) -> Any | None:
    return next(
        (c for c in components if c.type == "Pac" and c.number == port),
        None,
    )


def apply_port_shifts(components: Iterable[Any], args: Iterable[PortArg]) -> list[PortArg]:
    """Set the shift of the matching Pac ports; return the ignored arguments."""
    components = list(components)
    ignored = []
    for arg in args:
        pac = _find_port(components, arg.port)
        if pac is None:
            logger.warning(
                "'--port-shift %s %s %s' Port '%s' does not exist -> Ignored",
                arg.port, arg.first, arg.second, arg.port,
            )
            ignored.append(arg)
            continue
        pac.shift_x = parse_port_value(arg.first, True)
        pac.shift_y = parse_port_value(arg.second, True)
    return ignored


def apply_port_sizes(components: Iterable[Any], args: Iterable[PortArg]) -> list[PortArg]:
    """Set the length and width of the matching Pac ports; return the ignored arguments."""
    components = list(components)
    ignored = []
    for arg in args:
        pac = _find_port(components, arg.port)
        if pac is None:
            logger.warning(
                "'--port-size %s %s %s' Port '%s' does not exist -> Ignored",
                arg.port, arg.first, arg.second, arg.port,
            )
            ignored.append(arg)
            continue
        pac.length = parse_port_value(arg.first, False)
        pac.width = parse_port_value(arg.second, False)
        pac.is_size_set = True
    return ignored