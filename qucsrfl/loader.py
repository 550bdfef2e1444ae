"""Loading of a Qucs schematic, its netlist and its data file into components."""

from __future__ import annotations

import argparse
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from qucsrfl.ports import PortArg, apply_port_shifts, apply_port_sizes
from qucsrfl.schematic import (
    Component,
    SchematicError,
    convert_qucsstudio,
    detect_format,
    find_dataset,
    parse_components,
    parse_data,
    parse_netlist,
)

logger = logging.getLogger(__name__)

_SCH_SUFFIX = re.compile(r"\.sch$")


@dataclass
class Schematic:
    """A parsed schematic: its components and where they were read from."""

    schematic_path: str
    netlist_path: str
    components: list[Component] = field(default_factory=list)
    unprintables: list[str] = field(default_factory=list)
    variables: dict[str, float] = field(default_factory=dict)
    dataset_path: Optional[str] = None
    is_qucsstudio: bool = False
    tmp_schematic_path: Optional[str] = None


def _read_lines(path: str) -> list[str]:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as exc:
        raise SchematicError(f"Cannot open {path}") from exc


def _warn_unprintable(unprintables: Sequence[str]) -> None:
    if unprintables:
        logger.warning(
            "Schematic contains some unprintable transmission lines %s -> Ignored",
            ", ".join(unprintables),
        )


def load(
    schematic_path: str,
    netlist_path: Optional[str] = None,
    used_elements: Iterable[str] = (),
    excluded_elements: Iterable[str] = (),
    port_shifts: Iterable[PortArg] = (),
    port_sizes: Iterable[PortArg] = (),
    keep_tmp_files: bool = False,
) -> Schematic:
    """Read a schematic and its netlist into a :class:`Schematic`.

    Without an explicit netlist, the ``.net`` file next to the schematic is
    used. QucsStudio schematics are converted in memory; the converted file
    is only written out as ``<name>.tmp.sch`` when ``keep_tmp_files`` is set.
    """
    schematic_path = str(schematic_path)
    if not _SCH_SUFFIX.search(schematic_path):
        raise SchematicError(f"Invalid input format : {schematic_path}")
    default_netlist = _SCH_SUFFIX.sub(".net", schematic_path)
    tmp_path = _SCH_SUFFIX.sub(".tmp.sch", schematic_path)

    lines = _read_lines(schematic_path)
    software = detect_format(lines[0] if lines else "")
    is_qucsstudio = software == "QucsStudio"
    tmp_written: Optional[str] = None
    if is_qucsstudio:
        logger.warning(
            "%s is a QucsStudio schematic, compatibility is not guaranteed",
            schematic_path,
        )
        lines = convert_qucsstudio(lines)
        if keep_tmp_files:
            try:
                Path(tmp_path).write_text(
                    "".join(line + "\n" for line in lines), encoding="utf-8"
                )
            except OSError as exc:
                raise SchematicError(f"Cannot open {tmp_path}") from exc
            tmp_written = tmp_path

    netlist = str(netlist_path) if netlist_path else default_netlist
    netlist_lines = _read_lines(netlist)

    dataset, has_equation = find_dataset(lines, schematic_path)
    variables: dict[str, float] = {}
    data_lines: Optional[list[str]] = None
    if dataset:
        try:
            data_lines = _read_lines(dataset)
        except SchematicError:
            data_lines = None
    if data_lines is None:
        if has_equation:
            logger.warning(
                "Cannot open %s. Not problematic if variables and equations are "
                "not used. Otherwise, try to run a simulation to produce it.",
                dataset or "",
            )
    else:
        variables = parse_data(data_lines)

    components, unprintables = parse_components(
        lines, variables, used_elements, excluded_elements
    )
    parse_netlist(netlist_lines, components)

    apply_port_shifts(components, port_shifts)
    apply_port_sizes(components, port_sizes)

    _warn_unprintable(unprintables)

    return Schematic(
        schematic_path=schematic_path,
        netlist_path=netlist,
        components=components,
        unprintables=unprintables,
        variables=variables,
        dataset_path=dataset if data_lines is not None else None,
        is_qucsstudio=is_qucsstudio,
        tmp_schematic_path=tmp_written,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qucsrfl",
        description="Read a Qucs RF schematic and list its printable components.",
    )
    parser.add_argument("schematic", help="schematic file (.sch)")
    parser.add_argument("-n", "--netlist", help="netlist file (default: <name>.net)")
    parser.add_argument(
        "-u", "--use", action="append", default=[], metavar="LABEL",
        help="only use this element (repeatable)",
    )
    parser.add_argument(
        "-e", "--exclude", action="append", default=[], metavar="LABEL",
        help="exclude this element (repeatable)",
    )
    parser.add_argument(
        "--port-shift", action="append", nargs=3, default=[], metavar=("N", "X", "Y"),
        help="shift port N by X and Y",
    )
    parser.add_argument(
        "--port-size", action="append", nargs=3, default=[], metavar=("N", "L", "W"),
        help="set the length and width of port N",
    )
    parser.add_argument(
        "-k", "--keep", action="store_true", help="keep temporary files"
    )
    return parser


def _port_args(raw: Iterable[Sequence[str]], parser: argparse.ArgumentParser) -> list[PortArg]:
    args = []
    for number, first, second in raw:
        try:
            args.append(PortArg(int(number), first, second))
        except ValueError:
            parser.error(f"invalid port number: {number}")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point; returns the exit status."""
    parser = _build_parser()
    options = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s : %(message)s")
    try:
        schematic = load(
            options.schematic,
            options.netlist,
            options.use,
            options.exclude,
            _port_args(options.port_shift, parser),
            _port_args(options.port_size, parser),
            options.keep,
        )
    except SchematicError as exc:
        logger.error("%s", exc)
        return 1

    print(f"Schematic file : {schematic.schematic_path}")
    print(f"Netlist file : {schematic.netlist_path}")
    if schematic.dataset_path:
        print(f"Data file : {schematic.dataset_path}")
    for component in schematic.components:
        nets = " ".join(net or "-" for net in component.nets)
        print(f"{component.type}\t{component.label}\t{nets}")
    print(f"Number of elements : {len(schematic.components)}")
    return 0