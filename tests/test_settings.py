from __future__ import annotations

import json
import os

from vpnkeeper.config.settings import SupervisorSettings


def test_defaults_fill_paths(tmp_path) -> None:
    settings = SupervisorSettings(data_dir=str(tmp_path))
    assert settings.install_dir == os.path.join(str(tmp_path), "installer")
    assert settings.account_file == os.path.join(str(tmp_path), "account.txt")
    assert settings.installer_args == ["/S"]
    assert settings.max_attempts == 25
    assert settings.factory_reset_after == 100
    assert settings.status_disconnected == "Tunnel Status: Disconnected"


def test_missing_file_gives_defaults(tmp_path) -> None:
    settings = SupervisorSettings.load(str(tmp_path / "settings.json"))
    assert settings.update_retries == 3


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "settings.json"
    settings = SupervisorSettings(data_dir=str(tmp_path), poll_interval=0.5,
                                  restart_commands=[["true"]])
    settings.save(str(path))

    loaded = SupervisorSettings.load(str(path))
    assert loaded.poll_interval == 0.5
    assert loaded.restart_commands == [["true"]]
    assert loaded.data_dir == str(tmp_path)


def test_unknown_keys_ignored(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"data_dir": str(tmp_path), "bogus": 1, "max_attempts": 10}),
                    encoding="utf-8")
    loaded = SupervisorSettings.load(str(path))
    assert loaded.max_attempts == 10


def test_corrupt_file_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert SupervisorSettings.load(str(path)).max_attempts == 25


def test_ensure_dirs(tmp_path) -> None:
    settings = SupervisorSettings(data_dir=str(tmp_path / "data"))
    settings.ensure_dirs()
    assert os.path.isdir(os.path.join(settings.data_dir, "logs"))
    assert os.path.isdir(settings.install_dir)
