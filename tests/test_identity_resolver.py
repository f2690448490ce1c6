from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from auth_center.application.dto.auth import WechatAccessToken, WechatProfile
from auth_center.application.services.identity_resolver import IdentityResolver, extract_union_id
from auth_center.domain.exceptions import MissingUnifyingIdentityError
from tests.fakes import FakeAuthPort


NOW = datetime(2026, 1, 10, tzinfo=timezone.utc)


def _access(*, open_id: str = "openid-1", union_id: str | None = None) -> WechatAccessToken:
    return WechatAccessToken(
        access_token="access",
        open_id=open_id,
        union_id=union_id,
        expires_in=7200,
        refresh_token=None,
        scope=None,
    )


def _profile(
    *,
    union_id: str | None = None,
    nickname: str | None = "Alice",
    avatar_url: str | None = "https://img.example.com/a.png",
) -> WechatProfile:
    return WechatProfile(open_id="openid-1", nickname=nickname, avatar_url=avatar_url, union_id=union_id)


class RacingAuthPort(FakeAuthPort):
    """Holds the first lookups of every thread until all of them have missed."""

    def __init__(self, parties: int):
        super().__init__()
        self._parties = parties
        self._barrier = threading.Barrier(parties)
        self._lookups = 0

    def get_user_by_union_id(self, *, union_id: str):
        user = super().get_user_by_union_id(union_id=union_id)
        with self._lock:
            self._lookups += 1
            held = self._lookups <= self._parties
        if held:
            self._barrier.wait(timeout=5)
        return user


def test_mp_surface_prefers_profile_union_id():
    union_id = extract_union_id(
        access=_access(union_id="from-access"),
        profile=_profile(union_id="from-profile"),
        surface="mp",
    )
    assert union_id == "from-profile"


def test_open_surface_prefers_exchange_union_id():
    union_id = extract_union_id(
        access=_access(union_id="from-access"),
        profile=_profile(union_id="from-profile"),
        surface="open",
    )
    assert union_id == "from-access"


@pytest.mark.parametrize("surface", ["open", "mp"])
def test_falls_back_to_other_location(surface: str):
    only_access = extract_union_id(access=_access(union_id="u-a"), profile=_profile(), surface=surface)
    only_profile = extract_union_id(access=_access(), profile=_profile(union_id="u-p"), surface=surface)
    assert (only_access, only_profile) == ("u-a", "u-p")


def test_missing_union_id_creates_nothing():
    auth_port = FakeAuthPort()
    resolver = IdentityResolver(auth_port=auth_port)

    with pytest.raises(MissingUnifyingIdentityError):
        resolver.resolve(
            access=_access(union_id="  "),
            profile=_profile(union_id=None),
            surface="mp",
            app_id="wx-mp",
            now=NOW,
        )

    assert auth_port.users == {}
    assert auth_port.accounts == {}


def test_two_surfaces_share_one_user_with_two_accounts():
    auth_port = FakeAuthPort()
    resolver = IdentityResolver(auth_port=auth_port)

    web = resolver.resolve(
        access=_access(open_id="open-web", union_id="union-1"),
        profile=_profile(),
        surface="open",
        app_id="wx-open",
        now=NOW,
    )
    mp = resolver.resolve(
        access=_access(open_id="open-mp"),
        profile=_profile(union_id="union-1"),
        surface="mp",
        app_id="wx-mp",
        now=NOW,
    )

    assert web.is_new_user is True
    assert mp.is_new_user is False
    assert web.user.id == mp.user.id
    assert len(auth_port.users) == 1
    assert sorted(account.kind for account in auth_port.accounts.values()) == ["mp", "web"]


def test_repeat_login_refreshes_profile_without_erasing_with_blanks():
    auth_port = FakeAuthPort()
    resolver = IdentityResolver(auth_port=auth_port)
    kwargs = {"access": _access(), "surface": "mp", "app_id": "wx-mp", "now": NOW}

    resolver.resolve(profile=_profile(union_id="union-1", nickname="Alice"), **kwargs)
    renamed = resolver.resolve(profile=_profile(union_id="union-1", nickname="Alicia"), **kwargs)
    blank = resolver.resolve(profile=_profile(union_id="union-1", nickname="", avatar_url=None), **kwargs)

    assert renamed.account.nickname == "Alicia"
    assert blank.account.nickname == "Alicia"
    assert blank.account.avatar_url == "https://img.example.com/a.png"
    assert len(auth_port.accounts) == 1
    stored = next(iter(auth_port.accounts.values()))
    assert stored.nickname == "Alicia"


def test_concurrent_first_logins_converge_on_one_user():
    parties = 2
    auth_port = RacingAuthPort(parties)
    resolver = IdentityResolver(auth_port=auth_port)
    results = []
    errors = []

    def login():
        try:
            results.append(
                resolver.resolve(
                    access=_access(),
                    profile=_profile(union_id="union-race"),
                    surface="mp",
                    app_id="wx-mp",
                    now=NOW,
                )
            )
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=login) for _ in range(parties)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert auth_port.create_user_calls == parties
    assert len(auth_port.users) == 1
    assert len(auth_port.accounts) == 1
    assert {result.user.id for result in results} == set(auth_port.users)
    assert sorted(result.is_new_user for result in results) == [False, True]
