# transfer_engine.py
# ============================================================
# FUNDS TRANSFER WITH ONE-TIME COUPONS
# ============================================================
import logging
import math
import re
from decimal import Decimal

from bank_errors import (
    InsufficientFunds,
    InvalidAmount,
    InvalidCoupon,
    InvalidRecipient,
    TransferRejected,
    Unauthenticated,
)
from bank_store import CouponRegistry

logger = logging.getLogger(__name__)

AMOUNT_RE = re.compile(r"\s*([0-9]+)\s*")


def parse_amount(raw) -> int:
    """
    Parses a client supplied amount into a positive integer.

    Only plain decimal digits (optionally padded with whitespace) are
    accepted. "12abc", "1.5", "-3", "1e3", "0" and "" are all rejected with
    ``InvalidAmount`` instead of being coerced into something else.
    """
    if isinstance(raw, bool):
        raise InvalidAmount()
    if isinstance(raw, int):
        value = raw
    else:
        match = AMOUNT_RE.fullmatch(raw or "") if isinstance(raw, str) else None
        if match is None:
            raise InvalidAmount()
        try:
            value = int(match.group(1))
        except ValueError:
            # more digits than int() is willing to convert
            raise InvalidAmount()
    if value <= 0:
        raise InvalidAmount()
    return value


def discounted_amount(amount, coupon=None) -> int:
    if coupon is None:
        return amount
    return math.ceil(Decimal(amount) * (1 - coupon.discount))


class TransferResult:
    def __init__(self, ok, error=None, balance=None, amount=None, coupon=None):
        self.ok = ok
        self.error = error
        self.balance = balance
        self.amount = amount
        self.coupon = coupon

    @property
    def reason(self):
        return None if self.error is None else self.error.code

    @classmethod
    def rejected(cls, error):
        return cls(False, error=error)

    def __repr__(self):
        if self.ok:
            return f"TransferResult(ok, amount={self.amount}, balance={self.balance})"
        return f"TransferResult(rejected, reason={self.reason!r})"


class TransferEngine:
    """
    Validates and executes transfers between accounts of ``store``.

    The whole lookup-validate-debit-credit-consume sequence runs inside one
    ``store.transaction()``:
    - balances are conserved (debit == credit) even under concurrent requests
    - a coupon is consumed only by a transfer that succeeded
    - two requests racing with the same coupon cannot both use it
    """

    def __init__(self, store, coupons=None):
        self.store = store
        self.coupons = coupons or CouponRegistry(store)

    def execute(self, sender, recipient, raw_amount, coupon_code=None):
        try:
            with self.store.transaction():
                result = self._apply(sender, recipient, raw_amount, coupon_code or None)
        except TransferRejected as e:
            logger.info("Transfer %s -> %r rejected: %s", sender, recipient, e.code)
            return TransferResult.rejected(e)
        logger.info("Transfer %s -> %s of %d%s", sender, recipient, result.amount,
                    f" with coupon {result.coupon}" if result.coupon else "")
        return result

    def _apply(self, sender, recipient, raw_amount, coupon_code):
        source = self.store.get(sender)
        if source is None:
            raise Unauthenticated()

        coupon = None
        if coupon_code is not None:
            coupon = self.coupons.find(sender, coupon_code)
            if coupon is None:
                raise InvalidCoupon()

        amount = discounted_amount(parse_amount(raw_amount), coupon)

        target = self.store.get(recipient)
        if target is None or target.username == source.username:
            raise InvalidRecipient()
        if amount <= 0:
            raise InvalidAmount()
        if source.balance < amount:
            raise InsufficientFunds()

        source.balance -= amount
        target.balance += amount
        self.store.put(source)
        self.store.put(target)

        if coupon is not None:
            self.coupons.consume(sender, coupon.code)

        return TransferResult(True, balance=source.balance, amount=amount,
                              coupon=coupon.code if coupon else None)
