import pytest

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
from qucsrfl.units import mstub_shift

SCHEMATIC = """<Qucs Schematic 0.0.19>
<Properties>
  <DataSet=circuit.dat>
</Properties>
<Components>
  <Pac P1 1 100 200 18 -26 0 1 "1" 1 "50 Ohm" 1 "0 dBm" 0 "1 GHz" 0 "26.85" 0>
  <GND * 1 100 230 0 0 0 0>
  <.SP SP1 1 0 300 0 67 0 0 "lin" 1 "1 GHz" 1 "10 GHz" 1 "19" 1 "no" 0>
  <SUBST Subst1 1 400 400 -30 24 0 0 "3.66" 1 "0.508 mm" 1 "35 um" 1 "0.004" 1 "0.022e-6" 1 "0.15e-6" 1>
  <MLIN MS1 1 200 100 -26 15 0 0 "Subst1" 1 "1 mm" 1 "10 mm" 1 "Hammerstad" 0 "Kirschning" 0 "26.85" 0>
  <MLIN MS2 0 200 300 -26 15 0 0 "Subst1" 1 "1 mm" 1 "5 mm" 1 "Hammerstad" 0>
  <MLIN MS3 2 200 400 -26 15 0 0 "Subst1" 1 "3 mm" 1 "5 mm" 1 "Hammerstad" 0>
  <TLIN Line1 1 500 100 -26 20 0 0 "50 Ohm" 1 "1 mm" 1 "0 dB" 0 "26.85" 0>
  <MTEE MS4 1 300 100 -26 20 0 0 "Subst1" 1 "W1" 1 "2 mm" 1 "3 mm" 1 "Hammerstad" 0>
</Components>
<Wires>
</Wires>
""".splitlines()


def _by_label(components):
    return {c.label: c for c in components}


def test_detect_format_qucs():
    assert detect_format("<Qucs Schematic 0.0.19>\n") == "Qucs"


def test_detect_format_old_qucsstudio():
    assert detect_format("<QucsStudio Schematic 2.5.7>") == "QucsStudio"


def test_detect_format_rejects_new_qucsstudio():
    with pytest.raises(SchematicError):
        detect_format("<QucsStudio Schematic 3.0.0>")


def test_detect_format_rejects_unknown():
    with pytest.raises(SchematicError):
        detect_format("not a schematic")


def test_convert_qucsstudio_replaces_header_and_mstub():
    lines = [
        "<QucsStudio Schematic 2.5.7>",
        "<Components>",
        '  <MSTUB MS1 1 200 100 -26 15 0 0 "Subst1" 1>',
        "</Components>",
    ]
    converted = convert_qucsstudio(lines)
    assert converted[0] == "<Qucs Schematic 0.0.0>"
    assert converted[1] == "<Components>"
    assert converted[3] == "</Components>"
    expected_x = mstub_shift(True, "200", "0")
    expected_y = mstub_shift(False, "100", "0")
    assert converted[2] == (
        f'  <MRSTUB MS1 1 {expected_x} {expected_y} -26 15 0 0 "Subst1" 1>'
    )


def test_convert_qucsstudio_keeps_other_lines():
    lines = ["<QucsStudio Schematic 2.5.7>", "  <GND * 1 100 230 0 0 0 0>"]
    assert convert_qucsstudio(lines)[1:] == lines[1:]


def test_find_dataset_relative_path():
    assert find_dataset(SCHEMATIC, "proj/circuit.sch") == ("proj/circuit.dat", False)


def test_find_dataset_absolute_path():
    lines = ["<Properties>", "  <DataSet=/data/run.dat>", "</Properties>"]
    assert find_dataset(lines, "proj/circuit.sch") == ("/data/run.dat", False)


def test_find_dataset_detects_equation():
    lines = SCHEMATIC[:5] + ['  <Eqn Eqn1 1 300 300 -28 15 0 0 "y=1" 1 "yes" 0>']
    assert find_dataset(lines, "proj/circuit.sch") == ("proj/circuit.dat", True)


def test_find_dataset_without_dataset():
    assert find_dataset(["<Components>", "</Components>"], "a.sch") == (None, False)


def test_parse_data_reads_single_valued_variables():
    lines = [
        "<Qucs Dataset 0.0.19>",
        "<indep W1 1>",
        "  0.001",
        "</indep>",
        "<indep frequency 3>",
        "  1e9",
        "  2e9",
        "  3e9",
        "</indep>",
        "<indep L 1>",
        "  +2e3",
        "</indep>",
    ]
    variables = parse_data(lines)
    assert list(variables) == ["W1", "L"]
    assert variables["W1"] == pytest.approx(0.001)
    assert variables["L"] == pytest.approx(2000.0)


def test_parse_components_labels_and_unprintables():
    components, unprintables = parse_components(SCHEMATIC, {})
    assert [c.label for c in components] == ["P1", "SP1", "Subst1", "MS1", "MS3", "MS4"]
    assert unprintables == ["TLIN"]


def test_parse_components_pac():
    pac = _by_label(parse_components(SCHEMATIC, {})[0])["P1"]
    assert pac.type == "Pac"
    assert pac.number == 1
    assert pac.params["Z"] == pytest.approx(50.0)
    assert pac.rotation == 0


def test_parse_components_simulation():
    sp = _by_label(parse_components(SCHEMATIC, {})[0])["SP1"]
    assert sp.simtype == "lin"
    assert sp.number == 19
    assert sp.params["Fstart"] == pytest.approx(1e9)


def test_parse_components_substrate_lengths_in_mm():
    subst = _by_label(parse_components(SCHEMATIC, {})[0])["Subst1"]
    assert subst.params["er"] == pytest.approx(3.66)
    assert subst.params["H"] == pytest.approx(0.508)
    assert subst.params["tand"] == pytest.approx(0.004)


def test_parse_components_microstrip_line():
    mlin = _by_label(parse_components(SCHEMATIC, {})[0])["MS1"]
    assert mlin.substrate == "Subst1"
    assert mlin.width == pytest.approx(1.0)
    assert mlin.length == pytest.approx(10.0)
    assert mlin.active is True


def test_parse_components_semi_inactive():
    ms3 = _by_label(parse_components(SCHEMATIC, {})[0])["MS3"]
    assert ms3.active is False


def test_parse_components_variable_lookup():
    mtee = _by_label(parse_components(SCHEMATIC, {"W1": 0.5})[0])["MS4"]
    assert mtee.params["W1"] == pytest.approx(500.0)
    assert mtee.params["W2"] == pytest.approx(2.0)


def test_parse_components_missing_variable_is_zero():
    mtee = _by_label(parse_components(SCHEMATIC, {})[0])["MS4"]
    assert mtee.params["W1"] == 0.0


def test_parse_components_used_elements():
    components, _ = parse_components(SCHEMATIC, {}, used_elements=["MS1"])
    assert [c.label for c in components] == ["MS1"]


def test_parse_components_excluded_elements():
    components, _ = parse_components(SCHEMATIC, {}, excluded_elements=["MS1", "P1"])
    labels = [c.label for c in components]
    assert "MS1" not in labels and "P1" not in labels
    assert "MS4" in labels


def test_parse_components_unsupported_simulation_is_ignored():
    lines = [
        "<Components>",
        '  <.SP SP1 1 0 300 0 67 0 0 "list" 1 "1 GHz" 1 "10 GHz" 1 "19" 1>',
        "</Components>",
    ]
    assert parse_components(lines, {}) == ([], [])


def test_parse_components_malformed_active_field():
    lines = [
        "<Components>",
        '  <MLIN MS1 x 200 100 -26 15 0 0 "Subst1" 1 "1 mm" 1 "10 mm" 1>',
        "</Components>",
    ]
    with pytest.raises(SchematicError):
        parse_components(lines, {})


def test_component_net_accessors():
    component = Component("MS1", "MLIN")
    component.set_net(2, "7")
    assert component.net(2) == "7"
    assert component.nets == ["", "7", "", ""]
    with pytest.raises(IndexError):
        component.net(5)


def test_parse_netlist_assigns_nets():
    components = [
        Component("P1", "Pac"),
        Component("MS1", "MLIN"),
        Component("MS4", "MTEE"),
        Component("MS3", "MLIN", active=False),
    ]
    netlist = [
        "# Qucs 0.0.19  circuit.sch",
        "",
        'Pac:P1 _net0 gnd Num="1" Z="50 Ohm"',
        'MLIN:MS1 _net0 _net1 Subst="Subst1"',
        'MTEE:MS4 _net1 _net2 _net3 Subst="Subst1"',
        'R:MS3.0 _net2 _net4 R="0"',
        'R:MS3.1 _net2 _net5 R="0"',
    ]
    parse_netlist(netlist, components)
    p1, ms1, ms4, ms3 = components
    assert p1.nets == ["0", "", "", ""]
    assert ms1.nets == ["0", "1", "", ""]
    assert ms4.nets == ["1", "2", "3", ""]
    assert ms3.nets == ["2", "4", "5", ""]


def test_parse_netlist_ignores_header_before_blank_line():
    components = [Component("MS1", "MLIN")]
    parse_netlist(['MLIN:MS1 _net0 _net1 Subst="Subst1"'], components)
    assert components[0].nets == ["", "", "", ""]