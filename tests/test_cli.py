import json

import pytest

from loadgrid.cli import main
from loadgrid.config import PREFERENCE_KEY


def run(data_file, prefs_file, *args):
    main([str(data_file), "--prefs", str(prefs_file), *args])


def test_show(data_file, prefs_file, capsys):
    run(data_file, prefs_file, "show")
    out = capsys.readouterr().out
    assert "Alice" in out
    assert "Showing 4 of 4 staff" in out


def test_move_accepted(data_file, prefs_file, capsys):
    run(data_file, prefs_file, "move", "t3", "CCW6_C", "t4", "CCW6", "CCW6_CCW6")
    out = capsys.readouterr().out
    assert "Dana: load 6/10 (4 available)" in out


def test_move_rejected_exits_with_code_2(data_file, prefs_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(data_file, prefs_file, "move", "t1", "CCW6_A", "t4", "CCW7", "CCW7_CCW7")
    assert excinfo.value.code == 2
    assert "Invalid move" in capsys.readouterr().err


def test_move_to_unknown_column_exits_with_code_2(data_file, prefs_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(data_file, prefs_file, "move", "t1", "CCW6_A", "t4", "CCW6", "CCW6_TYPO")
    assert excinfo.value.code == 2
    assert "Unknown column 'CCW6_TYPO'" in capsys.readouterr().err


def test_move_with_capacity_enforcement(data_file, prefs_file):
    run(data_file, prefs_file, "move", "t1", "CCW7_A", "t4", "CCW7", "CCW7_CCW7")
    with pytest.raises(SystemExit) as excinfo:
        run(data_file, prefs_file, "move", "t3", "CCW6_C", "t4", "CCW6", "CCW6_CCW6", "--enforce-capacity")
    assert excinfo.value.code == 2


def test_capacity_out_of_range_is_an_error(data_file, prefs_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(data_file, prefs_file, "capacity", "t1", "99")
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("ERROR:")


def test_view_commands_update_preferences(data_file, prefs_file, capsys):
    run(data_file, prefs_file, "toggle-division", "HS")
    run(data_file, prefs_file, "sort", "name")
    run(data_file, prefs_file, "sort", "name")
    run(data_file, prefs_file, "threshold", "2")
    out = capsys.readouterr().out
    assert "Division HS collapsed" in out
    assert "Sort: name (desc)" in out

    saved = json.loads(prefs_file.read_text(encoding="utf-8"))[PREFERENCE_KEY]
    assert saved["collapsedDivisions"] == ["HS"]
    assert saved["prepsThreshold"] == 2

    run(data_file, prefs_file, "reset-view")
    saved = json.loads(prefs_file.read_text(encoding="utf-8"))[PREFERENCE_KEY]
    assert saved["collapsedDivisions"] == []


def test_verify(data_file, prefs_file, capsys):
    run(data_file, prefs_file, "verify")
    assert "Failed: 0" in capsys.readouterr().out


def test_verify_failure_exit_code(data_file, prefs_file):
    run(data_file, prefs_file, "move", "t3", "CCW6_C", "t4", "CCW6", "CCW6_CCW_E_6")
    with pytest.raises(SystemExit) as excinfo:
        run(data_file, prefs_file, "verify")
    assert excinfo.value.code == 1


def test_export(data_file, prefs_file, tmp_path, capsys):
    output = tmp_path / "out.xlsx"
    run(data_file, prefs_file, "export", "--output", str(output))
    assert output.exists()
    assert "Grid exported" in capsys.readouterr().out


def test_import_staff(data_file, prefs_file, tmp_path, capsys):
    csv_path = tmp_path / "staff.csv"
    csv_path.write_text("name,division,capacity,id\nIvy,HS,14,t9\n", encoding="utf-8")
    run(data_file, prefs_file, "import-staff", str(csv_path))
    assert "Imported 1 staff" in capsys.readouterr().out
    teachers = json.loads(data_file.read_text(encoding="utf-8"))["teachers"]
    assert teachers[-1]["id"] == "t9"


def test_missing_data_file_is_an_empty_grid(tmp_path, prefs_file, capsys):
    run(tmp_path / "none.json", prefs_file, "show")
    assert "Showing 0 of 0 staff" in capsys.readouterr().out
