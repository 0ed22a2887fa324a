import importlib.util
from pathlib import Path

import pytest

from webapp.auth.passwords import verify_password
from webapp.models import Role
from webapp.stores import build_stores

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "create_user.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("create_user_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(monkeypatch, tmp_path, answers, passwords):
    config = tmp_path / "config.yaml"
    config.write_text(f"dataDirectory: {tmp_path / 'data'}\nsecretKey: k\n", encoding="utf-8")
    script = _load_script()
    answers = iter(answers)
    passwords = iter(passwords)
    monkeypatch.setattr("sys.argv", ["create_user.py", "--config", str(config)])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    monkeypatch.setattr(script, "getpass", lambda prompt="": next(passwords))
    script.main()
    return build_stores(db_connector="files", data_directory=tmp_path / "data")


def test_creates_admin_user(monkeypatch, tmp_path, capsys):
    stores = _run(monkeypatch, tmp_path, ["carol", "carol@example.com", "y"], ["password1", "password1"])
    user = stores.users.find_by_username("carol")
    assert user.role == Role.ADMIN
    assert verify_password(user.password_hash, "password1")
    assert "OK -> usr_" in capsys.readouterr().out


def test_rejects_mismatched_passwords(monkeypatch, tmp_path):
    with pytest.raises(SystemExit):
        _run(monkeypatch, tmp_path, ["carol", "carol@example.com", ""], ["password1", "password2"])
    assert not (tmp_path / "data" / "users.yaml").exists()


def test_reports_validation_errors(monkeypatch, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, tmp_path, ["carol", "carol@example.com", ""], ["short", "short"])
    assert "too short" in str(excinfo.value)
