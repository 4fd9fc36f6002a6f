"""HTML pages shared by the tests."""

LOGIN_PAGE = """
<html><body>
<form id="PostForm" method="post" action="https://connexion.numericable.fr/Oauth/Oauth.php">
  <input type="hidden" name="action" value="connect">
  <input type="hidden" name="appkey" value="app-key-123">
</form>
</body></html>
"""

LOGIN_PAGE_WITHOUT_APPKEY = """
<html><body>
<form id="PostForm" method="post"><input type="hidden" name="action" value="connect"></form>
</body></html>
"""

TOKEN_PAGE = """
<html><body>
<form><input type="hidden" id="accessToken" value="token-456"></form>
</body></html>
"""

TOKEN_PAGE_WITHOUT_TOKEN = """
<html><body><p class="error">Identifiant ou mot de passe incorrect</p></body></html>
"""

FIRST_BILL = """
  <div id="firstFact">
    <h2>Facture du <span>01/03/2021</span></h2>
    <p class="right">45,67 €</p>
    <a class="linkBtn" href="/pages/billing/Download.aspx?id=3">Télécharger</a>
  </div>
"""


def other_bill(day: str, amount: str, href: str | None = "/pages/billing/Download.aspx?id=2") -> str:
    link = f'<a class="linkBtn" href="{href}">Télécharger</a>' if href else ""
    return f"""
  <div id="fact{day.replace('/', '')}">
    <h3>Du {day}</h3>
    <p class="right">{amount}</p>
    {link}
  </div>
"""


def bills_page(*blocks: str) -> str:
    return f"""
<html><body>
<div id="facture">
{''.join(blocks)}
</div>
</body></html>
"""
