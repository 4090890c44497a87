# csrf_guard.py
# ============================================================
# CSRF (CROSS-SITE REQUEST FORGERY) PROTECTION STRATEGIES
# ============================================================
# One application, three deployments:
#
#   none           - vulnerable baseline, nothing is checked
#   samesite       - the session cookie carries SameSite=Lax (or Strict) and
#                    the browser drops it on cross-site POSTs; the
#                    application itself checks nothing ("browser-enforced
#                    admission")
#   double-submit  - a random token is set as a readable cookie at login and
#                    must be echoed back in the form/query; the application
#                    compares the two ("application-enforced admission")
#
# The double-submit token is NOT bound to the session id and is not rotated
# per request. Anyone able to plant a cookie for this origin (a sibling
# subdomain, an injected Set-Cookie) can defeat it. That weakness belongs to
# the scheme being demonstrated and is kept as is.
# ============================================================
import hmac
import logging
import secrets

from bank_errors import CsrfMismatch, CsrfMissing, CsrfRejected

logger = logging.getLogger(__name__)

TOKEN_FIELD = "csrfToken"
TOKEN_HEADER = "X-CSRF-Token"


class CsrfGuard:
    """Base strategy. Subclasses override ``issue`` and ``verify``."""

    name = "base"
    uses_token = False
    session_samesite = None

    def __init__(self, cookie_name=TOKEN_FIELD, secure=False):
        self.cookie_name = cookie_name
        self.secure = secure

    def issue(self, session):
        """Returns a new token for ``session`` or None if the strategy has none."""
        return None

    def verify(self, cookie_value, submitted_value):
        """Returns None to admit, raises ``CsrfRejected`` to reject."""
        return None

    # ---------------- web helpers ----------------

    def set_token_cookie(self, response, token):
        if token is None:
            return
        # Must be readable by the page so it can be echoed back
        response.set_cookie(self.cookie_name, token, httponly=False,
                            secure=self.secure, path="/")

    def clear_token_cookie(self, response):
        response.delete_cookie(self.cookie_name, path="/")

    def submitted_token(self, request):
        return (request.form.get(TOKEN_FIELD)
                or request.args.get(TOKEN_FIELD)
                or request.headers.get(TOKEN_HEADER))

    def cookie_token(self, request):
        return request.cookies.get(self.cookie_name)

    def check(self, request):
        try:
            self.verify(self.cookie_token(request), self.submitted_token(request))
        except CsrfRejected as e:
            logger.warning("CSRF check failed on %s %s: %s", request.method, request.path, e.code)
            raise

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class NoCsrfGuard(CsrfGuard):
    name = "none"


class SameSiteGuard(CsrfGuard):
    name = "samesite"

    def __init__(self, cookie_name=TOKEN_FIELD, secure=False, policy="Lax"):
        super().__init__(cookie_name, secure)
        policy = (policy or "Lax").capitalize()
        if policy not in ("Lax", "Strict"):
            raise ValueError(f"SameSite policy must be Lax or Strict, got {policy!r}")
        self.session_samesite = policy


class DoubleSubmitGuard(CsrfGuard):
    name = "double-submit"
    uses_token = True

    def issue(self, session):
        return secrets.token_hex(32)

    def verify(self, cookie_value, submitted_value):
        if not cookie_value or not submitted_value:
            raise CsrfMissing()
        if not hmac.compare_digest(cookie_value.encode(), submitted_value.encode()):
            raise CsrfMismatch()
        return None


STRATEGIES = {
    NoCsrfGuard.name: NoCsrfGuard,
    SameSiteGuard.name: SameSiteGuard,
    DoubleSubmitGuard.name: DoubleSubmitGuard,
}


def make_guard(config):
    """Builds the guard selected by ``config["CSRF_STRATEGY"]``."""
    strategy = config.get("CSRF_STRATEGY", DoubleSubmitGuard.name)
    cls = STRATEGIES.get(strategy)
    if cls is None:
        raise ValueError(
            f"unknown CSRF_STRATEGY {strategy!r}, expected one of {sorted(STRATEGIES)}")
    kwargs = {
        "cookie_name": config.get("CSRF_COOKIE_NAME", TOKEN_FIELD),
        "secure": bool(config.get("COOKIE_SECURE", False)),
    }
    if cls is SameSiteGuard:
        kwargs["policy"] = config.get("SAMESITE_POLICY", "Lax")
    return cls(**kwargs)
