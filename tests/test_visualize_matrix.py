from pathlib import Path

import visualize_matrix
from schedule_matrix import Matrix, build_matrix
from tests.utils import EXAMPLE_GRID, write_grid_csv


def test_count_and_error_cells() -> None:
    result = build_matrix(EXAMPLE_GRID)
    assert visualize_matrix.count_matrix(result.matrix) == [[1, 0], [0, 2]]
    assert visualize_matrix.error_cells(result.matrix, result.errors) == {(0, 1)}


def test_heatmap_written(tmp_path: Path) -> None:
    result = build_matrix(EXAMPLE_GRID)
    out = visualize_matrix.plot_matrix_heatmap(result.matrix, result.errors, tmp_path / "p" / "preview.png", dpi=50)
    assert out is not None and out.exists()


def test_heatmap_skips_empty_matrix(tmp_path: Path) -> None:
    assert visualize_matrix.plot_matrix_heatmap(Matrix(), [], tmp_path / "none.png") is None
    assert not (tmp_path / "none.png").exists()


def test_main(tmp_path: Path) -> None:
    grid = write_grid_csv(tmp_path / "grid.csv", EXAMPLE_GRID)
    out = tmp_path / "preview.png"
    assert visualize_matrix.main(["--grid", str(grid), "--out", str(out), "--dpi", "50"]) == 0
    assert out.exists()


def test_main_unreadable_inputs(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "grid.txt"
    bad.write_text("x", encoding="utf-8")
    assert visualize_matrix.main(["--grid", str(bad), "--out", str(tmp_path / "a.png")]) == 2
    assert visualize_matrix.main(["--grid", str(tmp_path / "absent.csv"), "--out", str(tmp_path / "b.png")]) == 2
    assert capsys.readouterr().err.count("[error]") == 2
