from pathlib import Path

from maxq.utils.paths import is_max_file, output_dir_for, output_file_name, render_log_path, safe_name


def test_safe_name_strips_path_characters():
    assert safe_name('Client: "Lobby"/v2') == "Client Lobby v2"
    assert safe_name("  ") == "Unnamed"


def test_is_max_file_ignores_case():
    assert is_max_file("C:/scenes/Lobby.MAX")
    assert not is_max_file("C:/scenes/lobby.max.bak")


def test_output_dir_nests_project_folder():
    assert output_dir_for("/renders", None) == Path("/renders")
    assert output_dir_for("/renders", "  ") == Path("/renders")
    assert output_dir_for("/renders", "Hotel/Lobby") == Path("/renders") / "Hotel Lobby"


def test_output_file_name_uses_override_or_stem():
    assert output_file_name("C:/scenes/lobby.max") == "lobby.jpg"
    assert output_file_name("C:/scenes/lobby.max", "hero.png") == "hero.png"


def test_render_log_sits_beside_output():
    assert render_log_path(Path("/renders/lobby.jpg")) == Path("/renders/lobby_render.log")
