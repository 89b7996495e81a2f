"""Brief: Tests for the lighthouse command-line entrypoint.

Inputs:
  - None

Outputs:
  - None
"""

from __future__ import annotations

import logging

import pytest

from lighthouse.main import build_parser, main


@pytest.fixture(autouse=True)
def _drop_cli_handlers():
    """Brief: Remove handlers that main() installs on the root logger."""
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if type(h) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(h)
            h.close()
    root.setLevel(logging.WARNING)


def test_parser_defaults() -> None:
    """Brief: Parser defaults point at AdGuardHome.yaml with info logging."""

    args = build_parser().parse_args([])
    assert args.config == "AdGuardHome.yaml"
    assert args.log_level == "info"
    assert args.check is False


def test_main_writes_all_configs(tmp_path) -> None:
    """Brief: A run on an empty directory writes YAML, user filter and Corefile.

    Inputs:
      - tmp_path: Empty base directory.

    Outputs:
      - None; asserts exit code and generated files.
    """

    rc = main(["--base-dir", str(tmp_path), "--log-level", "error"])
    assert rc == 0
    assert (tmp_path / "AdGuardHome.yaml").is_file()
    assert (tmp_path / "Corefile").read_text().startswith(".:53 {\n")
    assert (tmp_path / "data" / "filters" / "0.txt").is_file()


def test_main_check_prints_corefile(tmp_path, capsys) -> None:
    """Brief: --check renders to stdout and writes nothing."""

    rc = main(["--base-dir", str(tmp_path), "--check", "--log-level", "error"])
    assert rc == 0
    out = capsys.readouterr().out
    assert out.startswith(".:53 {\n")
    assert "\tupstream tls://1.1.1.1 tls://1.0.0.1 { bootstrap 8.8.8.8:53 }\n" in out
    assert list(tmp_path.iterdir()) == []


def test_main_uses_cached_filter_contents(tmp_path, capsys) -> None:
    """Brief: Cached filter files make their filters appear in the Corefile."""

    filters_dir = tmp_path / "data" / "filters"
    filters_dir.mkdir(parents=True)
    (filters_dir / "1.txt").write_text("||ads^\n")
    rc = main(["--base-dir", str(tmp_path), "--check", "--log-level", "error"])
    assert rc == 0
    out = capsys.readouterr().out
    assert f'filter 1 "{filters_dir / "1.txt"}"' in out


def test_main_returns_1_on_load_error(tmp_path) -> None:
    """Brief: An unparsable config exits with status 1 and leaves files alone."""

    cfg = tmp_path / "custom.yaml"
    cfg.write_text("bind_port: [broken\n")
    rc = main(["--base-dir", str(tmp_path), "-c", "custom.yaml", "--log-level", "crit"])
    assert rc == 1
    assert cfg.read_text() == "bind_port: [broken\n"
    assert not (tmp_path / "Corefile").exists()
