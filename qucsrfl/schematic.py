"""Parsing of Qucs schematics, data files and netlists into components."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Optional

from qucsrfl.units import mstub_shift, process_field

logger = logging.getLogger(__name__)

NET_COUNT = 4


class SchematicError(Exception):
    """Raised when a schematic cannot be understood."""


@dataclass(eq=False)
class Component:
    """A schematic component with its fields, nets and layout state.

    ``number`` holds the port number of a Pac and the step count of a .SP.
    Components compare by identity, like the elements of a circuit.
    """

    label: str
    type: str
    active: bool = True
    mirrorx: bool = False
    rotation: int = 0
    substrate: str = ""
    params: dict[str, float] = field(default_factory=dict)
    number: int = 0
    simtype: str = ""
    nets: list[str] = field(default_factory=lambda: [""] * NET_COUNT)
    shift_x: float = 0.0
    shift_y: float = 0.0
    is_size_set: bool = False
    x: float = math.nan
    y: float = math.nan
    adjacents: dict[int, tuple["Component", int]] = field(
        default_factory=dict, repr=False
    )
    prev: Optional["Component"] = field(default=None, repr=False)

    @staticmethod
    def _check_index(index: int) -> None:
        if not 1 <= index <= NET_COUNT:
            raise IndexError(f"net index must be between 1 and {NET_COUNT}: {index}")

    def net(self, index: int) -> str:
        """Return the net connected to port ``index`` (1-based)."""
        self._check_index(index)
        return self.nets[index - 1]

    def set_net(self, index: int, value: str) -> None:
        """Connect port ``index`` (1-based) to net ``value``."""
        self._check_index(index)
        self.nets[index - 1] = value

    @property
    def width(self) -> float:
        return self.params.get("W", 0.0)

    @width.setter
    def width(self, value: float) -> None:
        self.params["W"] = value

    @property
    def length(self) -> float:
        return self.params.get("L", 0.0)

    @length.setter
    def length(self, value: float) -> None:
        self.params["L"] = value


# Schematic header: g1 software    g2 major
_HEAD = re.compile(r"^<(Qucs(?:Studio)?) Schematic ([0-9]+)\.[0-9]+\.[0-9]+>$")
# g1 begin    g2 x    g3 y    g4 end    g5 rotation
_MSTUB = re.compile(
    r"^  <MSTUB((?: [^ ]+){2} )(-?[0-9]+) (-?[0-9]+)((?: [^ ]+){3} ([0123])[^>]+>$)"
)
# g1 path    g2 absolute prefix
_DATASET = re.compile(r"^  <DataSet=(((?:[a-zA-Z]:)?[/]?).*)>$")
_DIRECTORY = re.compile(r"^(.*/)[^/]*$")
_TYPE_FIELD = re.compile(r"^  <([.a-zA-Z]+)")
_INDEP = re.compile(r"^<indep (.*) 1>$")
# g1 variable    g3 value    g4 scientific
_VARIABLE = re.compile(
    r"<indep (.*) 1>\n  ((\+?-?[0-9.]*)(([eE](?:-?|\+?)[0-9]+)?))\n</indep>"
)
_LEADING_INT = re.compile(r"\s*[+-]?[0-9]+")


def _nth_field(n: int) -> re.Pattern[str]:
    return re.compile(r"^ ( ([^ ]+)){%d}" % n)


_LABEL_FIELD = _nth_field(2)
_ACTIVE_FIELD = _nth_field(3)
_MIRROR_FIELD = _nth_field(8)
_ROTATION_FIELD = _nth_field(9)
_RAW_QUOTED = re.compile(r'^ ( ([^ ]+)){9}( "([^"]*)" [0-1]{1}){1}')

# g6 value    g8 scientific    g9 engineer    g10 variable
_VALUE = (
    r'( "(([0-9.]*)(([eE](?:-?|\+?)[0-9]+)? ?'
    r'([EPTGMkmunpfa]?(?:m?|(?:Hz)|(?:Ohm)?|(?:dBm)?))?)|([^"]*))"){1}'
)
_QUOTED = [
    re.compile(r'^ ( ([^ ]+)){9}( "[^"]*" [0-1]{1}){%d}' % skipped + _VALUE)
    for skipped in range(6)
]

_NETLIST_TYPE = re.compile(r"^([^:]*):")
_NETLIST_LABEL = re.compile(r"^([^:]*):([^ ]*)")
_NETLIST_NETS = [
    re.compile(r"^([^ ]* ){%d}_net([0-9]*)" % index)
    for index in range(1, NET_COUNT + 1)
]

_UNPRINTABLE = (
    "TLIN", "TAPEREDLINE", "TLIN4P", "CTLIN", "TWIST",
    "COAX", "RLCG", "BOND", "CIRCLINE", "RECTLINE",
)

# Microstrip components: their quoted fields after the substrate name.
_MICROSTRIP_FIELDS: dict[str, tuple[tuple[str, bool], ...]] = {
    "MCORN": (("W", True),),
    "MCROSS": (("W1", True), ("W2", True), ("W3", True), ("W4", True)),
    "MCOUPLED": (("W", True), ("L", True), ("S", True)),
    "MGAP": (("W1", True), ("W2", True), ("S", True)),
    "MMBEND": (("W", True),),
    "MLIN": (("W", True), ("L", True)),
    "MOPEN": (("W", True),),
    "MRSTUB": (("ri", True), ("ro", True), ("alpha", False)),
    "MSTEP": (("W1", True), ("W2", True)),
    "MTEE": (("W1", True), ("W2", True), ("W3", True)),
    "MVIA": (("D", True),),
}
_SUBST_FIELDS = (
    ("er", False), ("H", True), ("T", True),
    ("tand", False), ("rho", False), ("D", False),
)
_PAC_FIELDS = (("Z", False), ("P", False), ("F", False))

_NETS_BY_TYPE = {
    **dict.fromkeys(("MOPEN", "MRSTUB", "MSTUB", "MVIA"), 1),
    **dict.fromkeys(("Pac", "MCORN", "MGAP", "MLIN", "MMBEND", "MSTEP"), 2),
    "MTEE": 3,
    **dict.fromkeys(("MCOUPLED", "MCROSS"), 4),
}
# Semi-inactive components become R=0 resistors named <label>.<n>
_SEMI_INACTIVE_PORTS = ((".0", 2), (".1", 3), (".2", 4))


def _group(match: Optional[re.Match[str]], index: int) -> str:
    if match is None:
        return ""
    return match.group(index) or ""


def _strip(lines: Iterable[str]) -> Iterator[str]:
    return (line.rstrip("\r\n") for line in lines)


def _int(text: str, line: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise SchematicError(f"Malformed component line: {line!r}")
    return int(match.group(0))


def detect_format(header: str) -> str:
    """Return ``"Qucs"`` or ``"QucsStudio"`` for a schematic header line."""
    match = _HEAD.search(header.rstrip("\r\n"))
    software = _group(match, 1)
    if software == "Qucs":
        return software
    if software == "QucsStudio":
        if int(_group(match, 2)) >= 3:
            raise SchematicError("QucsStudio 3.x and newer are not supported.")
        return software
    raise SchematicError("neither a Qucs nor a QucsStudio schematic")


def convert_qucsstudio(lines: Iterable[str]) -> list[str]:
    """Convert a QucsStudio schematic (header included) to the Qucs format.

    The header is replaced and MSTUB components become MRSTUB ones, whose
    wire point is shifted accordingly.
    """
    stream = _strip(lines)
    next(stream, None)
    converted = ["<Qucs Schematic 0.0.0>"]
    for line in stream:
        match = _MSTUB.search(line)
        if match:
            converted.append(
                "  <MRSTUB"
                + match.group(1)
                + mstub_shift(True, match.group(2), match.group(5))
                + " "
                + mstub_shift(False, match.group(3), match.group(5))
                + match.group(4)
            )
        else:
            converted.append(line)
    return converted


def find_dataset(lines: Iterable[str], schematic_path: str) -> tuple[Optional[str], bool]:
    """Return the data file path named in the schematic and whether it has equations."""
    dataset: Optional[str] = None
    has_equation = False
    for line in _strip(lines):
        if line == "</Components>":
            break
        match = _DATASET.search(line)
        if match:
            if match.group(2):
                dataset = match.group(1)
            else:
                dataset = _DIRECTORY.sub(r"\1", schematic_path) + match.group(1)
        if _group(_TYPE_FIELD.search(line), 1) == "Eqn":
            has_equation = True
            break
    return dataset, has_equation


def parse_data(lines: Iterable[str]) -> dict[str, float]:
    """Read the single-valued variables of a Qucs data file."""
    variables: dict[str, float] = {}
    text = ""
    line_count = 0
    in_block = False
    for line in _strip(lines):
        if _INDEP.match(line):
            line_count = 0
            in_block = True
        # Variables are 3 line blocks: do not buffer longer ones.
        if in_block and line_count < 5:
            text += line + "\n"
            line_count += 1
        if line == "</indep>":
            match = _VARIABLE.search(text)
            if match:
                name = match.group(1)
                value = process_field(
                    {}, "", match.group(3) or "", match.group(4) or "", "", name, False
                )
                variables.setdefault(name, value)
                logger.debug("Variable : %s = %s", name, value)
            text = ""
            in_block = False
    return variables


def _quoted_field(
    line: str,
    skipped: int,
    variables: Mapping[str, float],
    label: str,
    is_length: bool,
) -> float:
    match = _QUOTED[skipped].search(line)
    return process_field(
        variables,
        _group(match, 10),
        _group(match, 6),
        _group(match, 8),
        _group(match, 9),
        label,
        is_length,
    )


def _build(
    line: str,
    type_: str,
    label: str,
    active: bool,
    mirrorx: bool,
    rotation: int,
    variables: Mapping[str, float],
) -> Optional[Component]:
    if type_ == "Pac":
        number = _int(_group(_QUOTED[0].search(line), 6), line)
        params = {
            name: _quoted_field(line, skipped, variables, label, is_length)
            for skipped, (name, is_length) in enumerate(_PAC_FIELDS, start=1)
        }
        return Component(label, type_, active, mirrorx, 0, params=params, number=number)
    if type_ == ".SP":
        simtype = _group(_RAW_QUOTED.search(line), 4)
        if simtype not in ("lin", "log"):
            logger.warning("%s : Unsupported simulation type : %s -> Ignored", label, simtype)
            return None
        params = {
            "Fstart": _quoted_field(line, 1, variables, label, False),
            "Fstop": _quoted_field(line, 2, variables, label, False),
        }
        match = _QUOTED[3].search(line)
        steps = int(
            process_field({}, "", _group(match, 6), _group(match, 8), _group(match, 9), label, False)
        )
        return Component(
            label, type_, mirrorx=mirrorx, params=params, number=steps, simtype=simtype
        )
    if type_ == "SUBST":
        params = {
            name: _quoted_field(line, skipped, variables, label, is_length)
            for skipped, (name, is_length) in enumerate(_SUBST_FIELDS)
        }
        return Component(label, type_, mirrorx=mirrorx, params=params)
    if type_ in _MICROSTRIP_FIELDS:
        substrate = _group(_RAW_QUOTED.search(line), 4)
        params = {
            name: _quoted_field(line, skipped, variables, label, is_length)
            for skipped, (name, is_length) in enumerate(_MICROSTRIP_FIELDS[type_], start=1)
        }
        return Component(label, type_, active, mirrorx, rotation, substrate, params)
    return None


def parse_components(
    lines: Iterable[str],
    variables: Mapping[str, float],
    used_elements: Iterable[str] = (),
    excluded_elements: Iterable[str] = (),
) -> tuple[list[Component], list[str]]:
    """Read the <Components> section of a schematic.

    Returns the components found and the types of the unprintable
    transmission lines met, in order of first appearance.
    """
    used = set(used_elements)
    excluded = set(excluded_elements)
    components: list[Component] = []
    unprintables: list[str] = []

    stream = _strip(lines)
    if "<Components>" not in stream:
        return components, unprintables

    for line in stream:
        if line == "</Components>":
            break
        type_ = _group(_TYPE_FIELD.search(line), 1)
        label = _group(_LABEL_FIELD.search(line), 2)
        active = _int(_group(_ACTIVE_FIELD.search(line), 2), line)
        mirrorx = bool(_int(_group(_MIRROR_FIELD.search(line), 2), line))
        rotation = 90 * _int(_group(_ROTATION_FIELD.search(line), 2), line)

        if used:
            if label not in used:
                continue
        elif label in excluded:
            continue

        if active == 0:
            logger.debug("%s : Inactive -> ignored", label)
            continue

        if type_ in _UNPRINTABLE:
            if type_ not in unprintables:
                unprintables.append(type_)
            continue

        # 2 is the semi-inactive (grey) state
        component = _build(line, type_, label, active != 2, mirrorx, rotation, variables)
        if component is not None:
            components.append(component)
    return components, unprintables


def _netlist_net(line: str, index: int) -> str:
    return _group(_NETLIST_NETS[index - 1].search(line), 2)


def parse_netlist(lines: Iterable[str], components: Iterable[Component]) -> None:
    """Connect the components to the nets listed in a Qucs netlist."""
    components = list(components)
    stream = _strip(lines)
    if "" not in stream:
        return
    for line in stream:
        type_ = _group(_NETLIST_TYPE.search(line), 1)
        label = _group(_NETLIST_LABEL.search(line), 2)
        for component in components:
            if component.label == label:
                for index in range(1, _NETS_BY_TYPE.get(type_, 0) + 1):
                    component.set_net(index, _netlist_net(line, index))
            elif type_ == "R":
                for suffix, port in _SEMI_INACTIVE_PORTS:
                    if component.label + suffix == label:
                        if not component.net(1):
                            component.set_net(1, _netlist_net(line, 1))
                        component.set_net(port, _netlist_net(line, 2))
                        break