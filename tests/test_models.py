"""Tests for oauthcli.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from oauthcli.models import Config, ReadCodeMode, Settings, Token


class TestToken:
    def test_optional_fields_omitted_from_json(self) -> None:
        token = Token(access_token="AT", client_id="abc", token_type="Bearer")
        assert token.to_json_dict() == {
            "access_token": "AT",
            "client_id": "abc",
            "token_type": "Bearer",
        }

    @pytest.mark.parametrize("token_type", ["bearer", "BEARER", "Bearer"])
    def test_bearer_any_case(self, token_type: str) -> None:
        token = Token(access_token="AT", client_id="abc", token_type=token_type)
        assert token.token_type == "Bearer"

    def test_other_token_types_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Token(access_token="AT", client_id="abc", token_type="MAC")

    def test_expires_in_must_be_integer(self) -> None:
        with pytest.raises(ValidationError):
            Token(access_token="AT", client_id="abc", token_type="Bearer", expires_in=1.5)

    def test_integral_float_expiry_accepted(self) -> None:
        token = Token(
            access_token="AT",
            client_id="abc",
            token_type="Bearer",
            expires_in=3600.0,
            expires_at=1.7e12,
        )
        assert token.expires_in == 3600
        assert type(token.expires_in) is int
        assert token.expires_at == 1_700_000_000_000

    def test_frozen(self) -> None:
        token = Token(access_token="AT", client_id="abc", token_type="Bearer")
        with pytest.raises(ValidationError):
            token.access_token = "other"  # type: ignore[misc]


class TestConfig:
    def test_empty_client_id_rejected(self, flat_config_data) -> None:
        flat_config_data["client_id"] = ""
        with pytest.raises(ValidationError):
            Config.model_validate(flat_config_data)

    def test_scope_none_by_default(self, config: Config) -> None:
        assert config.scope is None


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.listen_host == "127.0.0.1"
        assert settings.default_port == 8000

    @pytest.mark.parametrize("field,value", [("listen_timeout", 0), ("default_port", -1)])
    def test_bounds(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            Settings(**{field: value})


def test_read_code_mode_values() -> None:
    assert [m.value for m in ReadCodeMode] == ["webserver", "console"]
    assert ReadCodeMode("console") is ReadCodeMode.CONSOLE
