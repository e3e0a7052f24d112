from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from confctl.cli import cli


def write_config(tmp_path: Path, extra: str = "") -> Path:
    cfg = tmp_path / "conf.ini"
    cfg.write_text(
        """
[System]
Mode = master
Listen = :5212
Debug = true
SessionSecret = s3cr3t

[Database]
Type = sqlite
        """.strip()
        + "\n"
        + extra
    )
    return cfg


def test_init_creates_missing_file(tmp_path):
    target = tmp_path / "etc" / "conf.ini"
    runner = CliRunner()
    res = runner.invoke(cli, ["-c", str(target), "init"])
    assert res.exit_code == 0, res.output
    assert target.is_file()
    assert "Configuration ready" in res.output


def test_show_section_json(tmp_path, monkeypatch):
    cfg = write_config(tmp_path)
    monkeypatch.setenv("CONFCTL_CONFIG", str(cfg))

    runner = CliRunner()
    res = runner.invoke(cli, ["--json-output", "show", "--section", "System"])
    assert res.exit_code == 0, res.output
    data = json.loads(res.output)
    assert data["mode"] == "master"
    assert data["session_secret"] == "s3cr3t"
    assert data["debug"] is True


def test_show_tables(tmp_path):
    cfg = write_config(tmp_path)
    runner = CliRunner()
    res = runner.invoke(cli, ["-c", str(cfg), "show"])
    assert res.exit_code == 0, res.output
    assert "[Database]" in res.output and "sqlite" in res.output
    assert "FIELD" in res.output and "VALUE" in res.output
    assert "PUT,POST,GET,OPTIONS" in res.output


def test_show_unknown_section(tmp_path):
    cfg = write_config(tmp_path)
    res = CliRunner().invoke(cli, ["-c", str(cfg), "show", "--section", "Nope"])
    assert res.exit_code == 2
    assert "Unknown section: Nope" in res.output


def test_invalid_value_exits_with_message(tmp_path):
    cfg = write_config(tmp_path, "\n[Captcha]\nMode = 7\n")
    res = CliRunner().invoke(cli, ["-v", "-c", str(cfg), "show"])
    assert res.exit_code == 2
    assert "out of range" in res.output
    assert "Mode" in res.output
    assert "Troubleshooting suggestions" in res.output


def test_wrong_type_exits_with_message(tmp_path):
    cfg = write_config(tmp_path, "\n[Database]\nPort = lots\n")
    res = CliRunner().invoke(cli, ["-c", str(cfg), "init"])
    assert res.exit_code == 2
    assert "wrong type" in res.output


def test_binds_listing(tmp_path):
    rclone = tmp_path / "rclone.conf"
    rclone.write_text("[remote]\ntype = s3\n")
    cfg = write_config(tmp_path, f"\n[RClone]\nConfig = {rclone}\nBinds = /data:remote:mybucket\n")

    res = CliRunner().invoke(cli, ["--json-output", "-c", str(cfg), "binds"])
    assert res.exit_code == 0, res.output
    data = json.loads(res.output)
    assert {"mount": "/", "backend": "local", "target": "/"} in data["binds"]
    assert {"mount": "/data", "backend": "rclone", "target": "remote:mybucket"} in data["binds"]


def test_binds_none_configured(tmp_path):
    cfg = write_config(tmp_path)
    res = CliRunner().invoke(cli, ["-c", str(cfg), "binds"])
    assert res.exit_code == 0, res.output
    assert "No remote binds configured" in res.output


def test_locate_through_local_fs(tmp_path):
    cfg = write_config(tmp_path)
    res = CliRunner().invoke(cli, ["-c", str(cfg), "locate", "/srv/files/a.txt"])
    assert res.exit_code == 0, res.output
    assert res.output.strip() == "/srv/files/a.txt"


def test_secret_length():
    res = CliRunner().invoke(cli, ["secret", "--length", "12"])
    assert res.exit_code == 0, res.output
    assert len(res.output.strip()) == 12


def test_empty_config_option_exits(tmp_path, monkeypatch):
    monkeypatch.setenv("CONFCTL_CONFIG", str(tmp_path / "conf.ini"))
    res = CliRunner().invoke(cli, ["-c", "", "init"])
    assert res.exit_code == 2
    assert "path is empty" in res.output
    assert not (tmp_path / "conf.ini").exists()
