"""Authentication handshake against the Numericable portals."""
import logging
import httpx
from selectolax.parser import HTMLParser

from numericable.errors import LoginFailed, ScrapingError, UnknownError
from numericable.fetch.endpoints import (
    login_page_url,
    oauth_login_url,
    oauth_url,
    sso_link,
    token_login_url,
)
from numericable.parse.redact import redact_dict, redact_string

logger = logging.getLogger(__name__)


def scrape_app_key(html: str | None) -> str:
    """Read the app key from the login form."""
    node = HTMLParser(html or "").css_first('#PostForm input[name="appkey"]')
    app_key = node.attributes.get("value") if node else None
    if not app_key:
        raise ScrapingError("Numericable: could not retrieve app key")
    return app_key


def scrape_access_token(html: str | None) -> str:
    """Read the access token from the credential POST response."""
    node = HTMLParser(html or "").css_first("#accessToken")
    access_token = node.attributes.get("value") if node else None
    if not access_token:
        raise ScrapingError("Token fetching failed")
    return access_token


class Authenticator:
    """Turns a fresh client into an authenticated one.

    The handshake is: app key from the login page, OAuth initiation with
    that key, credential POST returning an access token, and finally the
    token redemption on the account portal. State between the steps lives
    in the client's cookie jar plus the app key and token passed along.
    """

    def __init__(self, client: httpx.AsyncClient, login: str, password: str):
        self.client = client
        self.login = login
        self.password = password

    async def authenticate(self) -> None:
        """Run the whole handshake.

        Raises:
            LoginFailed: app key or access token could not be obtained.
            UnknownError: the access token could not be redeemed.
        """
        try:
            app_key = await self.fetch_app_key()
            access_token = await self.fetch_access_token(app_key)
        except Exception as e:
            logger.error(f"Login failed: {redact_string(str(e))}")
            raise LoginFailed(redact_string(str(e))) from e

        try:
            await self.authenticate_with_token(access_token)
        except Exception as e:
            logger.error(f"Token authentication failed: {redact_string(str(e))}")
            raise UnknownError(redact_string(str(e))) from e

    async def fetch_app_key(self) -> str:
        logger.info("Fetching app key")
        response = await self.client.get(login_page_url())
        response.raise_for_status()
        return scrape_app_key(response.text)

    async def fetch_access_token(self, app_key: str) -> str:
        logger.info(redact_string(f"Logging in with appkey={app_key}"))

        # Only the cookies set by this call matter, its response is not checked
        await self.client.post(
            oauth_url(),
            data={
                "action": "connect",
                "linkSSO": sso_link(),
                "appkey": app_key,
                "isMobile": "",
            },
        )

        form = {"login": self.login, "pwd": self.password}
        logger.debug(f"Posting credentials: {redact_dict(form)}")
        response = await self.client.post(oauth_login_url(), data=form)
        response.raise_for_status()
        return scrape_access_token(response.text)

    async def authenticate_with_token(self, access_token: str) -> httpx.Response:
        logger.info("Authenticating by token")
        response = await self.client.post(
            token_login_url(),
            params={"accessToken": access_token},
        )
        response.raise_for_status()
        return response
