# bank_pages.py
# ============================================================
# HTML PAGES
# ============================================================
# Every value interpolated into a page goes through escape(): usernames,
# coupon codes and query parameters are attacker controlled.
# ============================================================
from urllib.parse import urlencode

from markupsafe import escape

from bank_errors import TRANSFER_ERRORS

STYLE = """
body { font-family: sans-serif; max-width: 36rem; margin: 2rem auto; }
.alert { padding: .6rem; border: 1px solid #c33; background: #fee; margin: 1rem 0; }
.alert.success { border-color: #3a3; background: #efe; }
label { display: block; margin-top: .5rem; }
"""

LOGIN_ALERTS = {
    "error=1": "Invalid credentials. Please try again.",
    "error=2": "You have not logged in. Please login.",
    "mustlogin=1": "You have not logged in. Please login.",
    "logout=1": "You have been logged out.",
}


def layout(title, body):
    return (
        "<!doctype html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title><style>{STYLE}</style></head>"
        f"<body><h1>{escape(title)}</h1>{body}</body></html>"
    )


def alert_box(message, success=False):
    if not message:
        return ""
    cls = "alert success" if success else "alert"
    return f'<div id="alert" class="{cls}">{escape(message)}</div>'


def login_alert(args):
    for key, message in LOGIN_ALERTS.items():
        name, value = key.split("=")
        if args.get(name) == value:
            return message
    return ""


def login_page(args):
    form = """
<form action="/login" method="post">
  <label>Username <input type="text" name="username" autocomplete="username"></label>
  <label>Password <input type="password" name="password" autocomplete="current-password"></label>
  <button type="submit">Login</button>
</form>"""
    return layout("Bank Login", alert_box(login_alert(args)) + form)


def transfer_alert(args, balance):
    """Returns ``(message, success)`` for the query string of /transfer."""
    if args.get("success"):
        message = f"Transfer completed successfully! Your remaining balance is {balance}$"
        if args.get("coupon"):
            message += f" (coupon {args['coupon']} applied)"
        return message, True
    if args.get("deletedcoupon"):
        return f"Coupon {args['deletedcoupon']} deleted.", True
    if args.get("error"):
        error = TRANSFER_ERRORS.get(args["error"])
        if error is not None:
            return error.message, False
        return "Invalid recipient or insufficient funds.", False
    return "", False


def coupon_list(coupons, csrf_token=None):
    if not coupons:
        return "<p>No coupons available.</p>"
    items = []
    for coupon in coupons:
        params = {"code": coupon.code}
        if csrf_token:
            params["csrfToken"] = csrf_token
        href = "/delete-coupon?" + urlencode(params)
        items.append(
            f"<li><code>{escape(coupon.code)}</code> {escape(coupon.label)} "
            f'<a href="{escape(href)}">delete</a></li>'
        )
    return "<ul>" + "".join(items) + "</ul>"


def transfer_page(username, balance, coupons, args, csrf_token=None):
    message, success = transfer_alert(args, balance)
    hidden = ""
    if csrf_token:
        hidden = f'<input type="hidden" name="csrfToken" value="{escape(csrf_token)}">'
    body = (
        f"{alert_box(message, success)}"
        f"<p>Logged in as <b>{escape(username)}</b>. "
        f'Balance: <span id="balance">{balance}</span>$</p>'
        '<form action="/transfer" method="post">'
        '<label>Recipient <input type="text" name="to"></label>'
        '<label>Amount <input type="number" name="amount" min="1"></label>'
        '<label>Coupon <input type="text" name="coupon"></label>'
        f"{hidden}"
        '<button type="submit">Transfer</button></form>'
        f"<h2>Your coupons</h2>{coupon_list(coupons, csrf_token)}"
        '<p><a href="/logout">Logout</a></p>'
    )
    return layout("Transfer", body)


def balance_page(username, balance):
    return (
        f"<h2>Balance for {escape(username)}: ${balance}</h2>"
        '<a href="/transfer">Back to Transfer</a>'
    )


def csrf_failed_page(error):
    body = (
        f"{alert_box(error.message)}"
        "<p>The request was rejected because it could not be proven to come "
        "from this site. No money was moved.</p>"
        '<p><a href="/transfer">Back to Transfer</a></p>'
    )
    return layout("CSRF check failed", body)


def internal_error_page():
    return layout("Internal Server Error", "<p>Something went wrong. Please try again later.</p>")
