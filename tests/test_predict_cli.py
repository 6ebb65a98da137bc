"""Tests for the recommendation CLI script."""

import sys

import pytest

from scripts.predict_cli import main


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "catalog.csv").write_text(
        "product_id,name,category,price\n"
        "p1,Acme Laptop 14,laptops,999.0\n"
        "p2,Globex Laptop 15,laptops,1299.0\n"
        "p3,Hooli Phone,smartphones,599.0\n"
    )
    (tmp_path / "interactions.csv").write_text(
        "user_id,product_id,type\n"
        "u1,p1,purchase\n"
        "u2,p1,view\n"
        "u2,p2,purchase\n"
        "u3,p3,click\n"
    )
    return tmp_path


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["predict_cli.py", *args])
    main()


def test_popular_respects_limit(monkeypatch, capsys, data_dir):
    run_cli(monkeypatch, "popular", "--limit", "1", "--data-dir", str(data_dir))

    output = capsys.readouterr().out
    assert "p1" in output
    assert "p2" not in output


def test_zero_limit_is_rejected(monkeypatch, capsys, data_dir):
    with pytest.raises(SystemExit) as exc_info:
        run_cli(monkeypatch, "popular", "--limit", "0", "--data-dir", str(data_dir))

    assert exc_info.value.code == 1
    assert "limit must be a positive integer" in capsys.readouterr().err


def test_similar_to_unknown_product_fails(monkeypatch, capsys, data_dir):
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "similar", "p404", "--data-dir", str(data_dir))

    assert "not found" in capsys.readouterr().err
