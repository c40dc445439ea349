from __future__ import annotations

from dataclasses import replace

import pytest

from backend.services.auth_service import (
    AccessTokenNotConfiguredError,
    AuthService,
    InvalidAccessTokenError,
)
from backend.utils.config import get_settings


def test_auth_disabled_resolves_default_coordinator() -> None:
    settings = replace(get_settings(), admin_token=None, default_coordinator_id="solo")
    assert AuthService(settings).resolve_coordinator(None) == "solo"


def test_sessions_map_to_their_coordinator() -> None:
    service = AuthService(replace(get_settings(), admin_token="token"))
    first = service.login("coord-a", "token")
    second = service.login("coord-b", "token")

    assert service.resolve_coordinator(first) == "coord-a"
    assert service.resolve_coordinator(second) == "coord-b"

    service.logout(first)
    with pytest.raises(InvalidAccessTokenError):
        service.resolve_coordinator(first)


def test_login_requires_configured_token() -> None:
    service = AuthService(replace(get_settings(), admin_token=None))
    with pytest.raises(AccessTokenNotConfiguredError):
        service.login("coord-a", "anything")


def test_login_rejects_wrong_token_and_missing_session() -> None:
    service = AuthService(replace(get_settings(), admin_token="token"))
    with pytest.raises(InvalidAccessTokenError):
        service.login("coord-a", "wrong")
    with pytest.raises(InvalidAccessTokenError):
        service.resolve_coordinator(None)
