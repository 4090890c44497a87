"""Smoke run against a live bank server started with the double-submit strategy.

    python bank_app.py &
    BASE_URL=http://127.0.0.1:5000 python smoke_endpoints.py

The server keeps its state in memory, so restart it before running this again.
"""
import os
import logging
import requests


BASE = os.environ.get("BASE_URL", "http://127.0.0.1:5000")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def assert_redirect(r, location):
    assert r.status_code in (301, 302, 303, 307, 308), (r.status_code, r.text)
    assert r.headers["Location"].endswith(location), r.headers["Location"]


def assert_csrf_failed(r):
    assert r.status_code == 403, (r.status_code, r.text)
    assert "CSRF check failed" in r.text


def balance(s):
    r = s.get(f"{BASE}/balance")
    r.raise_for_status()
    return int(r.text.split("$")[1].split("<")[0])


def main():
    s = requests.Session()

    logger.info("[auth] GET /transfer without session")
    r = s.get(f"{BASE}/transfer", allow_redirects=False)
    assert_redirect(r, "/login?mustlogin=1")
    logger.info("[auth] ok - redirected to login")

    logger.info("[login] POST /login with a wrong password")
    r = s.post(f"{BASE}/login", data={"username": "alice", "password": "nope"}, allow_redirects=False)
    assert_redirect(r, "/login?error=1")
    logger.info("[login] ok - rejected")

    logger.info("[login] POST /login as alice")
    r = s.post(f"{BASE}/login", data={"username": "alice", "password": "alice"}, allow_redirects=False)
    assert_redirect(r, "/transfer")
    token = s.cookies.get("csrfToken")
    assert token, "csrfToken cookie missing"
    start = balance(s)
    logger.info("[login] ok - balance=%s", start)

    logger.info("[csrf] POST /transfer without CSRF token (expect 403)")
    r = s.post(f"{BASE}/transfer", data={"to": "attacker", "amount": "500"}, allow_redirects=False)
    assert_csrf_failed(r)
    assert balance(s) == start
    logger.info("[csrf] ok - rejected without token, balance unchanged")

    logger.info("[csrf] POST /transfer with a mismatched token (expect 403)")
    r = s.post(f"{BASE}/transfer", data={"to": "attacker", "amount": "500", "csrfToken": "bad"},
               allow_redirects=False)
    assert_csrf_failed(r)
    logger.info("[csrf] ok - rejected mismatch")

    logger.info("[transfer] alice -> bob 100")
    r = s.post(f"{BASE}/transfer", data={"to": "bob", "amount": "100", "csrfToken": token},
               allow_redirects=False)
    assert_redirect(r, "/transfer?success=1")
    assert balance(s) == start - 100
    logger.info("[transfer] ok - balance=%s", start - 100)

    logger.info("[coupon] alice -> bob 100 with ALICE50")
    r = s.post(f"{BASE}/transfer", data={"to": "bob", "amount": "100", "coupon": "ALICE50", "csrfToken": token},
               allow_redirects=False)
    assert_redirect(r, "/transfer?success=1&coupon=ALICE50")
    assert balance(s) == start - 150
    r = s.post(f"{BASE}/transfer", data={"to": "bob", "amount": "100", "coupon": "ALICE50", "csrfToken": token},
               allow_redirects=False)
    assert_redirect(r, "/transfer?error=invalidcoupon")
    logger.info("[coupon] ok - applied once, reuse rejected")

    logger.info("[coupons] GET /coupons")
    codes = [c["code"] for c in s.get(f"{BASE}/coupons").json()]
    assert "ALICE50" not in codes
    logger.info("[coupons] ok - %s", codes)

    logger.info("[transfer] overdraft (expect insufficientfunds)")
    r = s.post(f"{BASE}/transfer", data={"to": "bob", "amount": str(start * 10), "csrfToken": token},
               allow_redirects=False)
    assert_redirect(r, "/transfer?error=insufficientfunds")
    logger.info("[transfer] ok")

    logger.info("[logout] POST /logout")
    r = s.post(f"{BASE}/logout", allow_redirects=False)
    assert_redirect(r, "/login?logout=1")
    r = s.get(f"{BASE}/transfer", allow_redirects=False)
    assert_redirect(r, "/login?mustlogin=1")
    logger.info("[logout] ok")

    logger.info("All endpoint smoke tests passed.")
    print("All endpoint smoke tests passed.")


if __name__ == "__main__":
    main()
