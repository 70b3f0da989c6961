"""Typed records for Foxbit REST v3 payloads.

Amounts and prices stay as the decimal strings the exchange sends. Keys the exchange adds
later are ignored on decode; fields it may omit default to ``None`` and are left out again
by ``to_dict``.
"""
from __future__ import annotations

from typing import Any, TypeVar

import msgspec
import msgspec.structs

from .errors import ExchangeDecodeError

R = TypeVar("R", bound="Record")

_BODY_SNIPPET = 300
# open_time .. quote_volume are always present in a candlestick row
_CANDLE_MIN_ROW = 8


class Record(msgspec.Struct, frozen=True, omit_defaults=True):
    """Base for exchange records: ``from_dict`` / ``to_dict``."""

    @classmethod
    def from_dict(cls: type[R], payload: Any) -> R:
        try:
            return msgspec.convert(payload, cls)
        except msgspec.ValidationError as e:
            raise ExchangeDecodeError(
                f"Cannot decode {cls.__name__}: {e}",
                body=str(payload)[:_BODY_SNIPPET],
                cause=e,
            ) from e

    def to_dict(self) -> Any:
        return msgspec.to_builtins(self)


class Category(Record):
    code: str | None = None
    name: str | None = None


class DepositInfo(Record):
    min_to_confirm: str | None = None
    min_amount: str | None = None


class WithdrawInfo(Record):
    enabled: bool | None = None
    min_amount: str | None = None
    fee: str | None = None


class Currency(Record):
    precision: int
    symbol: str | None = None
    name: str | None = None
    type: str | None = None
    deposit_info: DepositInfo | None = None
    withdraw_info: WithdrawInfo | None = None
    category: Category | None = None


class Market(Record):
    symbol: str
    quantity_min: str | None = None
    quantity_increment: str | None = None
    price_min: str | None = None
    price_increment: str | None = None
    base: Currency | None = None
    quote: Currency | None = None


class Quote(Record):
    side: str
    price: str
    base_currency: str | None = None
    quote_currency: str | None = None
    quantity: str | None = None
    amount: str | None = None


class OrderBook(Record):
    """Price levels are ``(price, quantity)`` pairs, best first."""

    sequence_id: int
    bids: tuple[tuple[str, str], ...]
    asks: tuple[tuple[str, str], ...]
    timestamp: int | None = None


class Candlestick(Record, array_like=True):
    """One kline. The exchange sends these as positional rows, not objects."""

    open_time: str
    open: str
    high: str
    low: str
    close: str
    close_time: str
    volume: str
    quote_volume: str
    trades_count: int | None = None
    taker_buy_volume: str | None = None
    taker_buy_quote_volume: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> Candlestick:
        return cls.from_dict(row)

    def to_row(self) -> list[Any]:
        row = list(msgspec.structs.astuple(self))
        while len(row) > _CANDLE_MIN_ROW and row[-1] is None:
            row.pop()
        return row


class Bank(Record):
    code: str
    name: str


class CurrentTime(Record):
    timestamp: int
    iso: str | None = None


class MemberDetails(Record):
    sn: str
    email: str | None = None
    level: int | None = None
    created_at: str | None = None
    external_id: str | None = None


class Order(Record):
    id: int
    sn: str | None = None
    client_order_id: str | None = None
    market_symbol: str | None = None
    side: str | None = None
    type: str | None = None
    state: str | None = None
    price: str | None = None
    price_avg: str | None = None
    quantity: str | None = None
    quantity_executed: str | None = None
    instant_amount: str | None = None
    instant_amount_executed: str | None = None
    created_at: str | None = None
    trades_count: int | None = None
    remark: str | None = None
    funds_received: str | None = None
    fee_paid: str | None = None
    post_only: bool | None = None
    time_in_force: str | None = None
    cancellation_reason: int | None = None


class Trade(Record):
    id: int
    sn: str | None = None
    order_id: int | None = None
    market_symbol: str | None = None
    side: str | None = None
    price: str | None = None
    quantity: str | None = None
    fee: str | None = None
    fee_currency_symbol: str | None = None
    created_at: str | None = None


class CreateOrderResponse(Record):
    id: int
    sn: str | None = None
    client_order_id: str | None = None


class CancelOrderResponse(Record):
    id: int
    sn: str | None = None
    client_order_id: str | None = None
