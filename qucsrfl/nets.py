"""Net bookkeeping: ports, connectivity checks and removal of dangling nets."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from qucsrfl.schematic import Component


class NetlistError(Exception):
    """Raised when the schematic connectivity cannot be laid out."""


def port_of(component: Component, net: str) -> int:
    """Return the 1-based port of ``component`` on ``net``, or 0 if none."""
    if not net:
        return 0
    return next(
        (index for index, value in enumerate(component.nets, start=1) if value == net),
        0,
    )


def has_intersection(components: Iterable[Component]) -> bool:
    """Tell whether a net joins more than two connection points."""
    counts = Counter(net for c in components for net in c.nets if net)
    return any(count > 2 for count in counts.values())


def check_intersection(components: Iterable[Component]) -> None:
    """Raise NetlistError when a wire connects more than two connection points."""
    if has_intersection(components):
        raise NetlistError(
            "A wire is used to connect more than two connection points.\n"
            "\tPlease use a component like a tee or a cross to avoid this."
        )


def _is_shared(components: Sequence[Component], owner: Component, net: str) -> bool:
    return any(c is not owner and net in c.nets for c in components)


def purge_nets(components: Iterable[Component]) -> None:
    """Disconnect every net that no other component uses."""
    components = list(components)
    for component in components:
        for index, net in enumerate(component.nets):
            if net and not _is_shared(components, component, net):
                component.nets[index] = ""