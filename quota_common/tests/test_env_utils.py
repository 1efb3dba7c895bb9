"""Tests for shared environment helpers."""

import pytest

from quota_common import env_utils


def test_require_env_names_variable_and_env_file(monkeypatch) -> None:
    monkeypatch.delenv("QUOTA_TEST_VALUE", raising=False)

    with pytest.raises(RuntimeError) as excinfo:
        env_utils.require_env(
            "QUOTA_TEST_VALUE", env_file=env_utils.ENV_FILE_PROVISIONER, hint="Try 1."
        )

    message = str(excinfo.value)
    assert "QUOTA_TEST_VALUE" in message
    assert "env/provisioner.env" in message
    assert message.endswith("Try 1.")


def test_require_env_rejects_blank_unless_allowed(monkeypatch) -> None:
    monkeypatch.setenv("QUOTA_TEST_VALUE", "  ")

    with pytest.raises(RuntimeError):
        env_utils.require_env("QUOTA_TEST_VALUE", env_file="env/test.env")
    assert env_utils.require_env(
        "QUOTA_TEST_VALUE", env_file="env/test.env", allow_empty=True
    ) == "  "


def test_get_optional_env_treats_blank_as_unset(monkeypatch) -> None:
    monkeypatch.setenv("QUOTA_TEST_VALUE", "")

    assert env_utils.get_optional_env("QUOTA_TEST_VALUE", env_file="env/test.env") is None


def test_get_float_env_uses_default_when_unset(monkeypatch) -> None:
    monkeypatch.delenv("QUOTA_TEST_VALUE", raising=False)

    assert env_utils.get_float_env("QUOTA_TEST_VALUE", env_file="env/test.env", default=1.5) == 1.5


def test_get_choice_env_normalizes_case(monkeypatch) -> None:
    monkeypatch.setenv("QUOTA_TEST_VALUE", " AUTO ")

    value = env_utils.get_choice_env(
        "QUOTA_TEST_VALUE",
        env_file="env/test.env",
        choices=("auto", "disabled"),
        default="disabled",
    )

    assert value == "auto"
