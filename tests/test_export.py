import json
from datetime import datetime, timezone

from webapp.export import encode_users, user_rows
from webapp.models import Role, Session, User


def _rows(file_stores):
    expiry = datetime(2030, 1, 1, tzinfo=timezone.utc)
    file_stores.sessions.save(Session(id="sess_1", expiry=expiry, user_id="usr_1"))
    file_stores.sessions.save(Session(id="sess_2", expiry=expiry, user_id="usr_1"))
    users = [
        User(id="usr_1", username="alice", email="alice@example.com", password_hash="secret-hash"),
        User(id="admin", username="admin", email="root@localhost", password_hash="secret-hash", role=Role.ADMIN),
    ]
    return user_rows(users, file_stores.sessions)


def test_rows_never_include_password_hash(file_stores):
    rows = _rows(file_stores)
    assert "secret-hash" not in json.dumps(rows)
    assert sorted(rows[0]["sessions"]) == ["sess_1", "sess_2"]
    assert rows[1]["role"] == "admin"


def test_csv_puts_sessions_in_one_cell(file_stores):
    rows = _rows(file_stores)
    body, media_type, headers = encode_users(rows, "CSV")
    assert media_type == "text/csv"
    assert headers["Content-Disposition"] == "attachment;filename=users.csv"
    assert body.splitlines()[0] == "ID,Username,Email,Role,Sessions"
    assert '"sess_' in body


def test_xml_document(file_stores):
    body, media_type, _ = encode_users(_rows(file_stores), "xml")
    assert media_type == "application/xml"
    assert body.startswith("<?xml")
    assert "<session>sess_1</session>" in body or "<session>sess_2</session>" in body


def test_unknown_format_falls_back_to_json(file_stores):
    body, media_type, headers = encode_users(_rows(file_stores), "pdf")
    assert media_type == "application/json"
    assert headers == {}
    assert json.loads(body)[0]["username"] == "alice"
