import stat

import pytest

from quiz_backend.application.admin.provisioning import (
    check_identifier,
    create_multi_db,
    generate_password,
    mask,
    plan_rotation,
    write_env_updates,
)
from quiz_backend.config import ProvisioningSettings


@pytest.mark.parametrize("value, expected", [(None, "(not set)"), ("", "(not set)"), ("abc", "***"), ("abcdefghij", "abc***hij")])
def test_mask(value, expected):
    assert mask(value) == expected


def test_check_identifier():
    assert check_identifier("quiz_test") == "quiz_test"
    for bad in ("", "quiz-test", "quiz`; DROP", "a b"):
        with pytest.raises(ValueError):
            check_identifier(bad)


def test_generated_passwords_are_unique():
    passwords = {generate_password() for _ in range(5)}
    assert len(passwords) == 5
    assert all(len(p) >= 24 for p in passwords)


def test_plan_rotation_skips_missing_users():
    plan = plan_rotation({"DEV_DATABASE_USER": "quiz_dev_user", "PROD_DATABASE_USER": ""})

    assert [(s.user, s.password_key) for s in plan] == [("quiz_dev_user", "DEV_DATABASE_PASSWORD")]
    assert plan[0].new_password


def test_write_env_updates(tmp_path):
    env_file = tmp_path / ".env.create-db.local"
    env_file.write_text("# comment\nDATABASE_HOST=db\nTEST_DATABASE_PASSWORD=old\n", encoding="utf-8")

    write_env_updates(env_file, {"TEST_DATABASE_PASSWORD": "new", "PROD_DATABASE_PASSWORD": "p"})

    assert env_file.read_text(encoding="utf-8").splitlines() == [
        "# comment",
        "DATABASE_HOST=db",
        "TEST_DATABASE_PASSWORD=new",
        "PROD_DATABASE_PASSWORD=p",
    ]
    assert stat.S_IMODE(env_file.stat().st_mode) == 0o600


def test_create_multi_db_requires_root_password():
    with pytest.raises(ValueError):
        create_multi_db(ProvisioningSettings(root_password=""))


def test_write_env_updates_replaces_export_and_spaced_lines(tmp_path):
    env_file = tmp_path / ".env.create-db.local"
    env_file.write_text(
        "export DEV_DATABASE_PASSWORD=old\nTEST_DATABASE_PASSWORD = old\n", encoding="utf-8"
    )

    write_env_updates(env_file, {"DEV_DATABASE_PASSWORD": "d", "TEST_DATABASE_PASSWORD": "t"})

    lines = env_file.read_text(encoding="utf-8").splitlines()
    assert lines == ["DEV_DATABASE_PASSWORD=d", "TEST_DATABASE_PASSWORD=t"]


def test_write_env_updates_creates_missing_file(tmp_path):
    env_file = tmp_path / ".env.new"

    write_env_updates(env_file, {"TEST_DATABASE_PASSWORD": "t"})

    assert env_file.read_text(encoding="utf-8").splitlines() == ["TEST_DATABASE_PASSWORD=t"]
