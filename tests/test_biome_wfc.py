import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from biome_wfc import format_grid, main
from tilegen.logging_config import setup_logging


def test_format_grid():
    assert format_grid([["grass", "tree"], [None, "grass"]]) == "gra tre\n?   gra"


def test_main_prints_map(capsys):
    code = main(["--preset", "forest", "--width", "4", "--height", "3", "--seed", "1", "--no-render"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Region 0:" in out
    map_lines = [line for line in out.splitlines() if line.startswith(("gra", "tre"))]
    assert len(map_lines) == 3


def test_main_show_rules(capsys):
    main(["--preset", "biomes", "--width", "2", "--height", "2", "--no-render", "--show-rules"])
    out = capsys.readouterr().out
    assert "Ice: ['Tundra', 'Ice']" in out


def test_main_reports_config_errors(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("preset: moon\n")
    assert main(["--config", str(path), "--no-render"]) == 1
    assert "Unknown preset" in capsys.readouterr().out


def test_setup_logging_writes_debug_file(tmp_path):
    log_file = tmp_path / "logs" / "tilegen.log"
    logger = setup_logging("WARNING", log_file=log_file)
    logging.getLogger("tilegen.wfc").debug("contradiction somewhere")
    for handler in logger.handlers:
        handler.flush()
    assert "contradiction somewhere" in log_file.read_text()
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_main_reports_malformed_values(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("width: ten\n")
    assert main(["--config", str(path), "--no-render"]) == 1
    assert "width must be a positive integer" in capsys.readouterr().out


def test_preset_flag_conflicts_with_inline_tiles(capsys):
    coast = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "configs", "coast.yaml")
    assert main(["--config", coast, "--preset", "forest", "--no-render"]) == 1
    assert "conflicts with the inline tiles" in capsys.readouterr().out
