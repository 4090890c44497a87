# bank_store.py
# ============================================================
# IDENTITY STORE AND COUPON REGISTRY
# ============================================================
# Accounts live behind a small store interface (get / put / transaction) so
# the business logic does not care whether it talks to a dict in memory or a
# real database. The in-memory store is the one the demo app runs on; a
# restart resets every balance and coupon to the seed data below.
# ============================================================
import hashlib
import hmac
import secrets
import threading
from contextlib import contextmanager
from decimal import Decimal

DEFAULT_ITERATIONS = 200_000


def hash_password(password, salt=None, iterations=DEFAULT_ITERATIONS):
    """
    Derives a password hash with PBKDF2-HMAC-SHA256.

    Each account gets its own random 16 byte salt, stored next to the hash.
    Returns ``(salt, digest)``.
    """
    if salt is None:
        salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return salt, dk


class Coupon:
    """A one-time discount owned by exactly one account."""

    __slots__ = ("code", "discount", "label")

    def __init__(self, code, discount, label=""):
        if not code:
            raise ValueError("coupon code must not be empty")
        discount = Decimal(str(discount))
        if not (0 <= discount < 1):
            raise ValueError(f"coupon discount must be in [0, 1), got {discount}")
        self.code = code
        self.discount = discount
        self.label = label

    def to_dict(self):
        return {
            "code": self.code,
            "discountFraction": float(self.discount),
            "label": self.label,
        }

    def __repr__(self):
        return f"Coupon({self.code!r}, {self.discount}, {self.label!r})"


class Account:
    def __init__(self, username, salt, password_hash, balance=0, coupons=(),
                 iterations=DEFAULT_ITERATIONS):
        if balance < 0:
            raise ValueError("balance must not be negative")
        coupons = list(coupons)
        codes = [c.code for c in coupons]
        if len(set(codes)) != len(codes):
            raise ValueError(f"duplicate coupon codes for {username!r}: {codes}")
        self.username = username
        self.salt = salt
        self.password_hash = password_hash
        self.iterations = iterations
        self.balance = int(balance)
        self.coupons = coupons

    def check_password(self, password: str) -> bool:
        # Timing-safe comparison of the recomputed digest
        _, dk = hash_password(password, self.salt, self.iterations)
        return hmac.compare_digest(dk, self.password_hash)

    def __repr__(self):
        return f"Account({self.username!r}, balance={self.balance})"


# ============================================================
# STORE INTERFACE
# ============================================================

class AccountStore:
    """
    Storage seam for accounts.

    ``transaction()`` must serialize every read-validate-write sequence that
    runs inside it against every other one: transfers and coupon removal rely
    on it to keep balances conserved and coupons single-use.
    """

    def get(self, username):
        raise NotImplementedError

    def put(self, account):
        raise NotImplementedError

    def usernames(self):
        raise NotImplementedError

    def transaction(self):
        raise NotImplementedError


class InMemoryAccountStore(AccountStore):
    def __init__(self):
        self._accounts = {}
        self._lock = threading.RLock()

    def get(self, username):
        if not username:
            return None
        return self._accounts.get(username)

    def put(self, account):
        with self._lock:
            self._accounts[account.username] = account

    def usernames(self):
        with self._lock:
            return sorted(self._accounts)

    @contextmanager
    def transaction(self):
        with self._lock:
            yield self


# ============================================================
# COUPON REGISTRY
# ============================================================

class CouponRegistry:
    """Per-user coupon collections stored on the accounts themselves."""

    def __init__(self, store):
        self.store = store

    def find(self, owner, code):
        account = self.store.get(owner)
        if account is None or not code:
            return None
        for coupon in account.coupons:
            if coupon.code == code:
                return coupon
        return None

    def consume(self, owner, code):
        # Removing a coupon that is already gone is not an error
        self.delete(owner, code)

    def delete(self, owner, code) -> bool:
        with self.store.transaction():
            account = self.store.get(owner)
            if account is None:
                return False
            remaining = [c for c in account.coupons if c.code != code]
            removed = len(remaining) != len(account.coupons)
            if removed:
                account.coupons = remaining
                self.store.put(account)
            return removed

    def list_for(self, owner):
        account = self.store.get(owner)
        if account is None:
            return []
        return list(account.coupons)


# ============================================================
# SEED DATA
# ============================================================

SEED_ACCOUNTS = [
    {
        "username": "alice",
        "password": "alice",
        "balance": 1000,
        "coupons": [("ALICE50", "0.5", "50% off"), ("ALICEFREE", "0.9", "90% off")],
    },
    {
        "username": "bob",
        "password": "bob",
        "balance": 1000,
        "coupons": [("BOB10", "0.1", "10% off")],
    },
    {
        "username": "attacker",
        "password": "attacker",
        "balance": 0,
        "coupons": [],
    },
]


def create_account(store, username, password, balance=0, coupons=(),
                   iterations=DEFAULT_ITERATIONS):
    salt, dk = hash_password(password, iterations=iterations)
    account = Account(
        username, salt, dk, balance,
        [Coupon(code, discount, label) for code, discount, label in coupons],
        iterations=iterations,
    )
    store.put(account)
    return account


def seed_store(store=None, iterations=DEFAULT_ITERATIONS):
    """Fills ``store`` (a fresh in-memory one by default) with the demo users."""
    if store is None:
        store = InMemoryAccountStore()
    for row in SEED_ACCOUNTS:
        create_account(store, iterations=iterations, **row)
    return store
