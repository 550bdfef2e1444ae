# qucsrfl

`qucsrfl` reads Qucs schematics of microstrip circuits, together with the
netlists Qucs wrote for them and their simulation data files, and turns them
into components with their parameters and their connections. It can then
check the wiring and group the elements into blocks of connected components.

It understands these component types: `Pac`, `.SP`, `SUBST`, `MCORN`,
`MCROSS`, `MCOUPLED`, `MGAP`, `MMBEND`, `MLIN`, `MOPEN`, `MRSTUB`, `MSTEP`,
`MTEE` and `MVIA`. Other transmission lines (`TLIN`, `TAPEREDLINE`, `TLIN4P`,
`CTLIN`, `TWIST`, `COAX`, `RLCG`, `BOND`, `CIRCLINE`, `RECTLINE`) cannot be
printed and are reported as ignored. Schematics saved by QucsStudio 2.x and
older are converted to the Qucs format in memory (`MSTUB` becomes `MRSTUB`);
QucsStudio 3.x and newer are rejected.

## Installation

```
pip install .
```

No dependencies beyond the Python standard library; Python 3.10 or newer.

## Command line

```
qucsrfl --help
```

```
qucsrfl filter.sch [-n filter.net] [-u LABEL ...] [-e LABEL ...]
        [--port-shift N X Y] [--port-size N L W] [-k]
```

The command reads a `.sch` schematic and its netlist (by default the `.net`
file next to it), prints the file names, then one line per component with
its type, label and four nets (`-` for an unconnected port), and the number
of components. It exits with status 1 when a file cannot be opened or the
schematic is not understood.

- `-n/--netlist`: netlist file to read instead of `<name>.net`.
- `-u/--use LABEL`: only keep the listed elements (repeatable).
- `-e/--exclude LABEL`: leave the listed elements out (repeatable; ignored
  when `--use` is given).
- `--port-shift N X Y`: shift `Pac` port number N by X and Y.
- `--port-size N L W`: give `Pac` port number N a length and a width.
- `-k/--keep`: write the converted QucsStudio schematic to `<name>.tmp.sch`.

Port values accept engineering suffixes and are expressed in millimetres
(`--port-shift 1 -2e-3 0` moves port 1 by -2 mm). Arguments naming a port
that does not exist are ignored with a warning.

If the schematic contains a `DataSet` entry, the data file it names is read
for the values of variables; run a simulation first so that it exists.
Missing variables are taken as 0 with a warning.

## Library use

```python
from qucsrfl.loader import load

schematic = load("filter.sch", netlist_path="filter.net")
for component in schematic.components:
    print(component.type, component.label, component.params, component.nets)
```

`load` returns a `Schematic` holding `components`, `unprintables`,
`variables`, `dataset_path`, `is_qucsstudio` and `tmp_schematic_path`. It
raises `SchematicError` for an invalid or unreadable input. Its keyword
arguments are `used_elements`, `excluded_elements`, `port_shifts`,
`port_sizes` (lists of `PortArg(port, first, second)`) and `keep_tmp_files`.

A `Component` keeps its numeric fields in `params` (for instance `W`, `L`,
`W1`…`W4`, `S`, `D`, `ri`, `ro`, `alpha`, `er`, `H`, `T`, `tand`, `rho`,
`Z`, `P`, `F`, `Fstart`, `Fstop`), lengths in millimetres. `width` and
`length` are shortcuts for `W` and `L`; `net(i)` and `set_net(i, name)` read
and set the net on port `i` (1 to 4).

Values carry engineering suffixes; `qucsrfl.units` converts them:

```python
from qucsrfl.units import suffix_multiplier, check_void

suffix_multiplier("", "GHz", False)   # 1e9
suffix_multiplier("e-3", "", True)    # 1.0  (1e-3 m is 1 mm)
check_void("", "MLIN1")               # "0", with a warning about MLIN1
```

The lower layers are usable on their own:

- `qucsrfl.schematic`: `detect_format`, `convert_qucsstudio`, `find_dataset`,
  `parse_data`, `parse_components`, `parse_netlist`.
- `qucsrfl.nets`: `port_of`, `has_intersection`, `check_intersection`
  (raises `NetlistError` when a wire joins more than two connection points),
  `purge_nets` (clears nets used by a single component).
- `qucsrfl.traversal`: `active_nets`, `first_net`, `find_next`,
  `populate_adjacents` (fills each component's `adjacents`) and
  `connected_blocks`, which walks the circuit depth first, sets each
  element's `prev`, consumes the nets and returns the blocks of connected
  geometric elements (`SUBST` and `.SP` are left out).
- `qucsrfl.ports`: `PortArg`, `parse_port_value`, `apply_port_shifts`,
  `apply_port_sizes`.

```python
from qucsrfl.nets import check_intersection, purge_nets
from qucsrfl.traversal import connected_blocks

check_intersection(schematic.components)
purge_nets(schematic.components)
blocks = connected_blocks(schematic.components)
```

## What it does not do

- It does not generate netlists: export the netlist from Qucs beforehand.
- The command only lists components; it does not run the wiring checks or
  the block grouping, which are library functions.
- It does not compute element coordinates, port shapes from neighbouring
  elements, substrate sizes or block placement, and it writes no layout,
  mesh or simulation script. There is no graphical preview.

## Tests

```
pip install .[test]
pytest
```