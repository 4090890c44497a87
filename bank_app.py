# bank_app.py
# ============================================================
# CSRF BANK - EDUCATIONAL DEMONSTRATION
# ============================================================
# A toy bank with a transfer form and one-time discount coupons, used to show
# Cross-Site Request Forgery and two mitigations. The mitigation is chosen
# once, at startup:
#
#   CSRF_STRATEGY=none           vulnerable: any site can make you pay
#   CSRF_STRATEGY=samesite       SameSite=Lax session cookie (browser enforced)
#   CSRF_STRATEGY=double-submit  cookie/form token comparison (app enforced)
#
# SETUP INSTRUCTIONS:
#   pip install -e .
#   CSRF_STRATEGY=none python bank_app.py
#   python attacker_site.py                         # the "evil" page
#
# ACCESS: http://127.0.0.1:5000/  (users alice/alice, bob/bob, attacker/attacker)
# DO NOT DEPLOY. Educational only.
# ============================================================
import logging
from functools import wraps
from urllib.parse import urlencode

from flask import Flask, g, jsonify, redirect, request

from bank_config import load_config
from bank_errors import CsrfRejected, InvalidCredentials, Unauthenticated
from bank_pages import (
    balance_page,
    csrf_failed_page,
    internal_error_page,
    login_page,
    transfer_page,
)
from bank_sessions import SessionManager
from bank_store import CouponRegistry, seed_store
from csrf_guard import make_guard
from transfer_engine import TransferEngine

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(overrides=None, store=None):
    """
    Builds the bank application.

    ``overrides`` wins over environment configuration; ``store`` replaces the
    seeded in-memory account store.
    """
    config = load_config(overrides)

    app = Flask(__name__)
    app.config.update(config)

    guard = make_guard(config)
    if store is None:
        store = seed_store(iterations=config["PBKDF2_ITERATIONS"])
    sessions = SessionManager(store)
    coupons = CouponRegistry(store)
    engine = TransferEngine(store, coupons)

    app.extensions["bank"] = {
        "store": store,
        "sessions": sessions,
        "coupons": coupons,
        "engine": engine,
        "guard": guard,
    }

    cookie_name = config["BANK_SESSION_COOKIE"]
    logger.info("Bank app using %s CSRF strategy", guard.name)

    # ============================================================
    # REQUEST HOOKS AND DECORATORS
    # ============================================================

    @app.before_request
    def load_user():
        g.session = sessions.resolve(request.cookies.get(cookie_name))
        g.user = g.session.username if g.session else None

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if g.session is None:
                raise Unauthenticated()
            return view(*args, **kwargs)
        return wrapper

    def csrf_protected(view):
        # Runs after login_required and before any side effect of the view
        @wraps(view)
        def wrapper(*args, **kwargs):
            guard.check(request)
            return view(*args, **kwargs)
        return wrapper

    # ============================================================
    # AUTHENTICATION
    # ============================================================

    @app.get("/")
    def index():
        if g.user:
            return redirect("/transfer")
        return redirect("/login")

    @app.get("/login")
    def login_form():
        return login_page(request.args)

    @app.post("/login")
    def login():
        username = request.form.get("username", "")
        password = request.form.get("password", "")
        try:
            session = sessions.login(username, password,
                                     previous_sid=request.cookies.get(cookie_name))
        except InvalidCredentials:
            return redirect("/login?error=1")

        resp = redirect("/transfer")
        resp.set_cookie(cookie_name, session.sid, httponly=True,
                        secure=config["COOKIE_SECURE"],
                        samesite=guard.session_samesite, path="/")
        guard.set_token_cookie(resp, guard.issue(session))
        return resp

    @app.route("/logout", methods=["GET", "POST"])
    def logout():
        sessions.destroy(request.cookies.get(cookie_name))
        resp = redirect("/login?logout=1")
        resp.delete_cookie(cookie_name, path="/")
        if guard.uses_token:
            guard.clear_token_cookie(resp)
        return resp

    # ============================================================
    # TRANSFERS AND COUPONS
    # ============================================================

    @app.get("/transfer")
    @login_required
    def transfer_form():
        account = store.get(g.user)
        token = guard.cookie_token(request) if guard.uses_token else None
        return transfer_page(account.username, account.balance,
                             coupons.list_for(g.user), request.args, token)

    @app.post("/transfer")
    @login_required
    @csrf_protected
    def transfer():
        # The sender always comes from the session, never from the form
        recipient = request.form.get("to") or request.form.get("recipient", "")
        result = engine.execute(g.user, recipient, request.form.get("amount"),
                                request.form.get("coupon") or None)
        if not result.ok:
            return redirect("/transfer?" + urlencode({"error": result.reason}))

        params = {"success": 1}
        if result.coupon:
            params["coupon"] = result.coupon
        return redirect("/transfer?" + urlencode(params))

    @app.get("/balance")
    @login_required
    def balance():
        return balance_page(g.user, store.get(g.user).balance)

    @app.get("/coupons")
    @login_required
    def list_coupons():
        return jsonify([c.to_dict() for c in coupons.list_for(g.user)])

    @app.get("/delete-coupon")
    @login_required
    @csrf_protected
    def delete_coupon():
        code = request.args.get("code")
        if not code:
            return redirect("/transfer")
        if coupons.delete(g.user, code):
            logger.info("Coupon %s deleted by %s", code, g.user)
        return redirect("/transfer?" + urlencode({"deletedcoupon": code}))

    # ============================================================
    # ERROR HANDLING
    # ============================================================

    @app.errorhandler(Unauthenticated)
    def handle_unauthenticated(e):
        return redirect("/login?mustlogin=1")

    @app.errorhandler(CsrfRejected)
    def handle_csrf(e):
        return csrf_failed_page(e), 403

    @app.errorhandler(500)
    def handle_500(e):
        # Details go to the server log only, never to the client
        logging.exception("Internal error: %s", e)
        return internal_error_page(), 500

    return app


def main():
    config = load_config()
    configure_logging(config["LOG_LEVEL"])
    app = create_app(config)
    app.run(host=config["BANK_HOST"], port=config["BANK_PORT"], debug=False)


if __name__ == "__main__":
    main()
