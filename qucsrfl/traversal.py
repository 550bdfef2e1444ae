"""Walking the circuit graph: adjacency and grouping into connected blocks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from qucsrfl.nets import NetlistError, port_of
from qucsrfl.schematic import Component

# Components that carry no geometry and never belong to a block.
_NON_GEOMETRIC = ("SUBST", ".SP")


def active_nets(component: Component) -> int:
    """Return how many ports of ``component`` are still connected."""
    return sum(1 for net in component.nets if net)


def first_net(component: Component) -> int:
    """Return the 1-based index of the first connected port, or 0 if none."""
    return next(
        (index for index, net in enumerate(component.nets, start=1) if net),
        0,
    )


def find_next(
    components: Iterable[Component], current: Component, net_index: int
) -> tuple[Component, int]:
    """Follow the net on port ``net_index`` of ``current`` to its other end.

    The link is consumed: the net is cleared on both components. Returns the
    component reached and the port through which it was reached.
    """
    net = current.net(net_index)
    if not net:
        raise ValueError(f"port {net_index} of {current.label} is not connected")
    current.set_net(net_index, "")
    for component in components:
        if component is current:
            continue
        port = port_of(component, net)
        if port:
            component.set_net(port, "")
            return component, port
    raise NetlistError(f"net {net} of {current.label} leads nowhere")


def populate_adjacents(components: Iterable[Component]) -> None:
    """Record, for every port of every component, the component and port facing it."""
    components = list(components)
    for element in components:
        for other in components:
            if other is element:
                continue
            for index in range(1, len(element.nets) + 1):
                port = port_of(other, element.net(index))
                if port:
                    element.adjacents[index] = (other, port)


def _add_to_block(block: list[Component], component: Component) -> None:
    if component.type in _NON_GEOMETRIC:
        return
    if any(member is component for member in block):
        return
    block.append(component)


def _remove(components: list[Component], component: Component) -> None:
    for index, member in enumerate(components):
        if member is component:
            del components[index]
            return


def connected_blocks(components: Sequence[Component]) -> list[list[Component]]:
    """Group the geometric components into blocks of connected elements.

    The graph is walked depth first from the first component; each element's
    ``prev`` is set to the one it was reached from. The walk consumes the
    nets, which are all empty afterwards. Blocks without any geometric
    element are dropped.
    """
    if not components:
        return []

    undone = list(components)
    pending: list[Component] = []
    current = undone[0]
    blocks: list[list[Component]] = [[]]
    _add_to_block(blocks[-1], current)

    while undone:
        count = active_nets(current)
        if count == 0:
            _remove(undone, current)
            if pending:
                current = pending.pop()
                _add_to_block(blocks[-1], current)
            elif undone:
                current = undone[0]
                blocks.append([])
                _add_to_block(blocks[-1], current)
            continue

        if count == 1:
            _remove(undone, current)
        else:
            pending.append(current)
        following, _ = find_next(components, current, first_net(current))
        following.prev = current
        current = following
        _add_to_block(blocks[-1], current)

    return [block for block in blocks if block]