"""URL builders for the Numericable portals."""
from numericable.config import config


def login_page_url() -> str:
    """Login page holding the app key form."""
    return f"{config.ACCOUNT_URL}/pages/connection/Login.aspx"


def token_login_url() -> str:
    """Login page redeeming the access token."""
    return f"{config.ACCOUNT_URL}/pages/connection/Login.aspx?link=HOME"


def sso_link() -> str:
    return f"{config.CONNECTION_URL}/pages/connection/Login.aspx?link=HOME"


def oauth_url() -> str:
    return f"{config.CONNECTION_URL}/Oauth/Oauth.php"


def oauth_login_url() -> str:
    return f"{config.CONNECTION_URL}/Oauth/login/"


def bills_page_url() -> str:
    """Billing-history page."""
    return f"{config.ACCOUNT_URL}/pages/billing/Invoice.aspx"


def absolute_url(href: str | None) -> str | None:
    """Prefix a site-relative link with the account portal URL."""
    if not href:
        return None
    return f"{config.ACCOUNT_URL}{href}"
