from __future__ import annotations

import httpx
import pytest
import spotipy

from pixelrelay.services import spotify as spotify_module
from pixelrelay.services.image_fetch import FetchError, ImageFetcher
from pixelrelay.services.spotify import SpotifyService, SpotifyServiceError
from pixelrelay.services.spotify_auth import AuthError


class StaticTokens:
    def __init__(self, token="tok", error=None):
        self.token = token
        self.error = error

    def get_access_token(self):
        if self.error:
            raise self.error
        return self.token


class FakeSpotipy:
    instances: list["FakeSpotipy"] = []
    response = None
    error = None

    def __init__(self, auth=None, requests_timeout=None):
        self.auth = auth
        FakeSpotipy.instances.append(self)

    def _respond(self):
        if FakeSpotipy.error is not None:
            raise FakeSpotipy.error
        return FakeSpotipy.response

    current_user_playing_track = _respond
    current_playback = _respond
    me = _respond


@pytest.fixture
def fake_spotipy(monkeypatch):
    FakeSpotipy.instances = []
    FakeSpotipy.response = None
    FakeSpotipy.error = None
    monkeypatch.setattr(spotify_module.spotipy, "Spotify", FakeSpotipy)
    return FakeSpotipy


def test_calls_use_the_provider_token(fake_spotipy):
    fake_spotipy.response = {"item": {"id": "x"}}

    assert SpotifyService(StaticTokens("abc")).currently_playing() == {"item": {"id": "x"}}
    assert fake_spotipy.instances[0].auth == "abc"


def test_me_defaults_to_empty_dict(fake_spotipy):
    assert SpotifyService(StaticTokens()).me() == {}


def test_spotify_errors_are_wrapped(fake_spotipy):
    fake_spotipy.error = spotipy.SpotifyException(401, -1, "The access token expired")

    with pytest.raises(SpotifyServiceError):
        SpotifyService(StaticTokens()).playback_state()


def test_auth_errors_propagate(fake_spotipy):
    with pytest.raises(AuthError):
        SpotifyService(StaticTokens(error=AuthError("no token"))).me()
    assert fake_spotipy.instances == []


@pytest.mark.parametrize(
    "playing, expected",
    [
        ({"item": {"album": {"images": [{"url": "big"}, {"url": "small"}]}}}, "big"),
        ({"item": {"album": {"images": []}}}, None),
        ({"item": {"type": "episode", "images": [{"url": "show"}]}}, None),
        ({"item": None}, None),
        (None, None),
    ],
)
def test_cover_url(playing, expected):
    assert SpotifyService.cover_url(playing) == expected


# ---------------------------------------------------------------------------
# ImageFetcher
# ---------------------------------------------------------------------------


def _fetcher(handler, **kwargs) -> ImageFetcher:
    return ImageFetcher(client=httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)


def test_fetch_returns_body():
    fetcher = _fetcher(lambda request: httpx.Response(200, content=b"img"))

    assert fetcher.fetch("https://i.scdn.co/image/x") == b"img"


@pytest.mark.parametrize("status", [404, 500])
def test_fetch_http_errors_raise_fetch_error(status):
    fetcher = _fetcher(lambda request: httpx.Response(status))

    with pytest.raises(FetchError):
        fetcher.fetch("https://i.scdn.co/image/x")


def test_fetch_transport_errors_raise_fetch_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(FetchError):
        _fetcher(handler).fetch("https://i.scdn.co/image/x")


def test_fetch_rejects_oversize_bodies():
    fetcher = _fetcher(lambda request: httpx.Response(200, content=b"x" * 11), max_bytes=10)

    with pytest.raises(FetchError):
        fetcher.fetch("https://i.scdn.co/image/x")
