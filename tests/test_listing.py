import io
import os
import sys

from dbshell.listing import build_config_dir, listing


def test_build_config_dir_linux_with_existing_xdg(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    shown, extra = build_config_dir("config.yaml")
    assert shown == os.path.join("$HOME/.config/dbshell", "config.yaml")
    assert extra == os.path.join(str(tmp_path.resolve()), "dbshell", "config.yaml")


def test_build_config_dir_missing_directory(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "missing"))
    shown, extra = build_config_dir("config.yaml")
    assert shown.endswith("config.yaml")
    assert extra == ""


def test_build_config_dir_relative_xdg_is_rejected(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", "relative/dir")
    assert build_config_dir("x.yaml")[1] == ""


def test_build_config_dir_darwin(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setenv("HOME", str(tmp_path))
    shown, extra = build_config_dir("config.yaml")
    assert shown == os.path.join("$HOME/Library/Application Support", "config.yaml")
    assert extra == ""


def _render(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    buf = io.StringIO()
    listing(buf)
    return buf.getvalue()


def test_listing_sections(monkeypatch, tmp_path):
    text = _render(monkeypatch, tmp_path)
    assert text.startswith("List of specially treated variables\n")
    for header in ("Display settings:", "Environment variables:", "Connection variables:"):
        assert header in text
    assert "  ON_ERROR_STOP\n    stop batch execution after error\n" in text
    assert "  border\n    border style (number)\n" in text
    assert "  TERM_GRAPHICS\n    use the specified terminal graphics\n" in text


def test_listing_config_paths(monkeypatch, tmp_path):
    text = _render(monkeypatch, tmp_path)
    shown, extra = build_config_dir("config.yaml")
    assert text.endswith(f"or define in {shown} ({extra})\n")
    assert "DBSHELL_CONFIG" in text
    assert extra in text.split("DBSHELL_CONFIG", 1)[1]


def test_listing_sections_are_right_trimmed(monkeypatch, tmp_path):
    text = _render(monkeypatch, tmp_path)
    assert "counts\n\n\n" not in text
    assert "last query, or 0\n\nDisplay settings:" in text