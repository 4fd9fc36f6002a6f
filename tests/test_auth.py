"""Tests for the authentication handshake."""
import asyncio
from urllib.parse import parse_qs

import httpx
import pytest
from numericable.auth.session import Authenticator, scrape_access_token, scrape_app_key
from numericable.errors import LOGIN_FAILED, LoginFailed, ScrapingError, UnknownError
from numericable.fetch.client import build_client
from pages import LOGIN_PAGE, LOGIN_PAGE_WITHOUT_APPKEY, TOKEN_PAGE, TOKEN_PAGE_WITHOUT_TOKEN


def make_handler(requests, login_page=LOGIN_PAGE, token_page=TOKEN_PAGE, redeem_status=200):
    """Fake portals answering by path."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path == "/pages/connection/Login.aspx" and request.method == "GET":
            return httpx.Response(200, text=login_page)
        if path == "/Oauth/Oauth.php":
            return httpx.Response(200, text="<html></html>", headers={"Set-Cookie": "PHPSESSID=abc; Path=/"})
        if path == "/Oauth/login/":
            return httpx.Response(200, text=token_page)
        if path == "/pages/connection/Login.aspx" and request.method == "POST":
            return httpx.Response(redeem_status, text="<html>Accueil</html>")
        return httpx.Response(404)

    return handler


def authenticate(handler):
    async def scenario():
        async with build_client(transport=httpx.MockTransport(handler)) as client:
            await Authenticator(client, "user@example.com", "secret").authenticate()

    asyncio.run(scenario())


def test_scrape_app_key():
    """Test app key extraction from the login form."""
    assert scrape_app_key(LOGIN_PAGE) == "app-key-123"


def test_scrape_app_key_missing():
    """Test a login page without app key."""
    with pytest.raises(ScrapingError):
        scrape_app_key(LOGIN_PAGE_WITHOUT_APPKEY)


def test_scrape_app_key_outside_form_ignored():
    """Test an appkey input outside #PostForm is not used."""
    html = '<form id="other"><input name="appkey" value="nope"></form>'
    with pytest.raises(ScrapingError):
        scrape_app_key(html)


def test_scrape_access_token():
    """Test access token extraction."""
    assert scrape_access_token(TOKEN_PAGE) == "token-456"
    with pytest.raises(ScrapingError):
        scrape_access_token(TOKEN_PAGE_WITHOUT_TOKEN)


def test_full_handshake():
    """Test the four requests and what they carry."""
    requests = []
    authenticate(make_handler(requests))

    assert [(r.method, r.url.path) for r in requests] == [
        ("GET", "/pages/connection/Login.aspx"),
        ("POST", "/Oauth/Oauth.php"),
        ("POST", "/Oauth/login/"),
        ("POST", "/pages/connection/Login.aspx"),
    ]

    oauth_form = parse_qs(requests[1].content.decode(), keep_blank_values=True)
    assert oauth_form["action"] == ["connect"]
    assert oauth_form["appkey"] == ["app-key-123"]
    assert oauth_form["isMobile"] == [""]
    assert oauth_form["linkSSO"][0].endswith("/pages/connection/Login.aspx?link=HOME")

    login_form = parse_qs(requests[2].content.decode())
    assert login_form == {"login": ["user@example.com"], "pwd": ["secret"]}

    redeem = requests[3]
    assert redeem.method == "POST"
    assert redeem.url.params["accessToken"] == "token-456"
    assert redeem.url.params["link"] == "HOME"


def test_cookies_shared_across_steps():
    """Test cookies set by the OAuth call are sent on the next requests."""
    requests = []
    authenticate(make_handler(requests))
    assert "PHPSESSID=abc" in requests[2].headers.get("cookie", "")


def test_missing_app_key_stops_after_one_request():
    """Test LOGIN_FAILED and no further call without app key."""
    requests = []
    with pytest.raises(LoginFailed) as excinfo:
        authenticate(make_handler(requests, login_page=LOGIN_PAGE_WITHOUT_APPKEY))

    assert excinfo.value.code == LOGIN_FAILED
    assert len(requests) == 1


def test_missing_access_token():
    """Test rejected credentials give LOGIN_FAILED."""
    requests = []
    with pytest.raises(LoginFailed):
        authenticate(make_handler(requests, token_page=TOKEN_PAGE_WITHOUT_TOKEN))
    assert len(requests) == 3


def test_network_error_is_login_failed():
    """Test network failures are reported as LOGIN_FAILED too."""

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LoginFailed) as excinfo:
        authenticate(handler)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_oauth_initiation_response_not_checked():
    """Test a failing OAuth initiation does not stop the handshake."""
    requests = []
    inner = make_handler(requests)

    def handler(request):
        if request.url.path == "/Oauth/Oauth.php":
            requests.append(request)
            return httpx.Response(500)
        return inner(request)

    authenticate(handler)
    assert len(requests) == 4


def test_token_redemption_failure_is_unknown_error():
    """Test a failing token redemption gives UNKNOWN_ERROR."""
    requests = []
    with pytest.raises(UnknownError):
        authenticate(make_handler(requests, redeem_status=500))
