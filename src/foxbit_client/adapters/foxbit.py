from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import quote

import requests

from .. import signing
from ..client import ExchangeClient
from ..errors import ExchangeDecodeError, ExchangeValidationError
from ..models import (
    Bank,
    CancelOrderResponse,
    Candlestick,
    CreateOrderResponse,
    Currency,
    CurrentTime,
    Market,
    MemberDetails,
    Order,
    OrderBook,
    Quote,
    Record,
    Trade,
)
from ..request import Credentials, Endpoint, HttpMethod, build_headers

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

DEFAULT_BASE_URL = "https://api.foxbit.com.br/rest/v3"


@dataclass(frozen=True)
class FoxbitConfig:
    base_url: str = DEFAULT_BASE_URL
    # Version prefix that goes into the prehash, whatever host the requests are sent to
    api_prefix: str = "/rest/v3"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FoxbitConfig:
        env = os.environ if environ is None else environ
        return cls(base_url=env.get("FOXBIT_V3_API") or DEFAULT_BASE_URL)


def _segment(name: str, value: Any) -> str:
    text = "" if value is None else str(value)
    if not text or text != text.strip():
        raise ExchangeValidationError(f"{name} must be non-empty with no surrounding whitespace")
    return quote(text, safe="")


class FoxbitClient(ExchangeClient):
    """
    Foxbit REST v3 client.

    Signature:
      prehash = timestamp + method + "/rest/v3" + path + query + body
      sign    = hex(HMAC_SHA256(secret, prehash))

    Headers:
      X-FB-ACCESS-KEY, X-FB-ACCESS-TIMESTAMP, X-FB-ACCESS-SIGNATURE

    Public endpoints are signed too unless ``sign_public=False``.
    """

    def __init__(
        self,
        access_key: str,
        secret: str,
        *,
        config: FoxbitConfig = FoxbitConfig(),
        timeout: float = 10.0,
        session: requests.Session | None = None,
        sign_public: bool = True,
    ):
        super().__init__(config.base_url, timeout=timeout, session=session)
        self.credentials = Credentials(access_key=access_key, secret=secret)
        self.config = config
        self.sign_public = sign_public
        logger.debug("Foxbit client for %s (sign_public=%s)", self.base_url, sign_public)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> FoxbitClient:
        """Build a client from ``ACCESS_KEY``, ``API_SECRET`` and ``FOXBIT_V3_API``."""
        env = os.environ if environ is None else environ
        access_key = env.get("ACCESS_KEY")
        secret = env.get("API_SECRET")
        if not access_key or not secret:
            raise ExchangeValidationError("ACCESS_KEY and API_SECRET must be set")
        return cls(access_key, secret, config=FoxbitConfig.from_env(env), **kwargs)

    # ---------- signing + dispatch ----------
    def _timestamp_ms(self) -> str:
        return signing.timestamp_ms()

    def _error_message(self, response: requests.Response) -> str:
        # Foxbit errors: {"error": {"message": "...", "code": 1234}}
        try:
            error = response.json().get("error")
        except (ValueError, AttributeError):
            error = None
        if isinstance(error, dict) and error.get("message"):
            code = error.get("code")
            return f"[{code}] {error['message']}" if code is not None else str(error["message"])
        return super()._error_message(response)

    def _call(self, endpoint: Endpoint) -> Any:
        headers: dict[str, str] = {}
        if endpoint.private or self.sign_public:
            headers = build_headers(
                endpoint,
                self.credentials,
                prefix=self.config.api_prefix,
                timestamp=self._timestamp_ms(),
            )
        return self._send(
            endpoint.method,
            endpoint.path,
            query=endpoint.query,
            payload=endpoint.payload,
            headers=headers,
        )

    def _call_list(self, endpoint: Endpoint, record: type[R]) -> list[R]:
        items = self._unwrap_data(self._call(endpoint), endpoint.path)
        return [record.from_dict(item) for item in items]

    # ---------- public endpoints ----------
    def list_currencies(self) -> list[Currency]:
        return self._call_list(Endpoint(HttpMethod.GET, "/currencies"), Currency)

    def list_markets(self) -> list[Market]:
        return self._call_list(Endpoint(HttpMethod.GET, "/markets"), Market)

    def get_market_quote(
        self,
        side: str,
        base_currency: str,
        quote_currency: str,
        quantity: str | None = None,
        amount: str | None = None,
    ) -> Quote:
        if not quantity and not amount:
            raise ExchangeValidationError("Must receive quantity or amount")
        params = {
            "side": side,
            "base_currency": base_currency,
            "quote_currency": quote_currency,
            "quantity": quantity,
            "amount": amount,
        }
        return Quote.from_dict(self._call(Endpoint(HttpMethod.GET, "/markets/quotes", params=params)))

    def get_order_book(self, market_symbol: str, depth: int = 20) -> OrderBook:
        if depth < 1:
            raise ExchangeValidationError("depth must be positive")
        path = f"/markets/{_segment('market_symbol', market_symbol)}/orderbook"
        return OrderBook.from_dict(self._call(Endpoint(HttpMethod.GET, path, params={"depth": depth})))

    def get_candlesticks(
        self,
        market_symbol: str,
        interval: str,
        start_time: str | None = None,
        end_time: str | None = None,
        limit: int | None = None,
    ) -> list[Candlestick]:
        path = f"/markets/{_segment('market_symbol', market_symbol)}/candlesticks"
        params = {"interval": interval, "start_time": start_time, "end_time": end_time, "limit": limit}
        rows = self._call(Endpoint(HttpMethod.GET, path, params=params))
        if not isinstance(rows, list):
            raise ExchangeDecodeError(f"Unexpected JSON shape from {path} (expected array)", body=str(rows)[:300])
        return [Candlestick.from_row(row) for row in rows]

    def list_banks(self) -> list[Bank]:
        return self._call_list(Endpoint(HttpMethod.GET, "/banks"), Bank)

    def get_current_time(self) -> CurrentTime:
        return CurrentTime.from_dict(self._call(Endpoint(HttpMethod.GET, "/system/time")))

    # ---------- private endpoints ----------
    def get_member_details(self) -> MemberDetails:
        return MemberDetails.from_dict(self._call(Endpoint(HttpMethod.GET, "/me", private=True)))

    def create_order(
        self,
        side: str,
        type: str,
        market_symbol: str,
        quantity: str | None = None,
        *,
        price: str | None = None,
        amount: str | None = None,
        client_order_id: str | None = None,
        remark: str | None = None,
        post_only: bool | None = None,
        time_in_force: str | None = None,
    ) -> CreateOrderResponse:
        if not quantity and not amount:
            raise ExchangeValidationError("Must receive quantity or amount")
        if type.upper() == "LIMIT" and price is None:
            raise ExchangeValidationError("LIMIT orders need a price")
        fields = {
            "side": side,
            "type": type,
            "market_symbol": market_symbol,
            "quantity": quantity,
            "price": price,
            "amount": amount,
            "client_order_id": client_order_id,
            "remark": remark,
            "post_only": post_only,
            "time_in_force": time_in_force,
        }
        body = {k: v for k, v in fields.items() if v is not None}
        endpoint = Endpoint(HttpMethod.POST, "/orders", body=body, private=True)
        return CreateOrderResponse.from_dict(self._call(endpoint))

    def list_orders(
        self,
        start_time: str | None = None,
        end_time: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
        market_symbol: str | None = None,
        state: str | None = None,
        side: str | None = None,
    ) -> list[Order]:
        params = {
            "start_time": start_time,
            "end_time": end_time,
            "page": page,
            "page_size": page_size,
            "market_symbol": market_symbol,
            "state": state,
            "side": side,
        }
        return self._call_list(Endpoint(HttpMethod.GET, "/orders", params=params, private=True), Order)

    def get_order_by_id(self, order_id: int | str) -> Order:
        path = f"/orders/by-order-id/{_segment('order_id', order_id)}"
        return Order.from_dict(self._call(Endpoint(HttpMethod.GET, path, private=True)))

    def get_order_by_client_id(self, client_order_id: str) -> Order:
        path = f"/orders/by-client-order-id/{_segment('client_order_id', client_order_id)}"
        return Order.from_dict(self._call(Endpoint(HttpMethod.GET, path, private=True)))

    def cancel_orders(
        self,
        type: str = "ALL",
        *,
        market_symbol: str | None = None,
        id: int | None = None,
        client_order_id: str | None = None,
    ) -> list[CancelOrderResponse]:
        kind = type.upper()
        if kind == "MARKET" and not market_symbol:
            raise ExchangeValidationError("MARKET cancellation needs market_symbol")
        if kind == "ID" and id is None:
            raise ExchangeValidationError("ID cancellation needs id")
        if kind == "CLIENT_ORDER_ID" and not client_order_id:
            raise ExchangeValidationError("CLIENT_ORDER_ID cancellation needs client_order_id")
        fields = {"type": type, "market_symbol": market_symbol, "id": id, "client_order_id": client_order_id}
        body = {k: v for k, v in fields.items() if v is not None}
        endpoint = Endpoint(HttpMethod.PUT, "/orders/cancel", body=body, private=True)
        return self._call_list(endpoint, CancelOrderResponse)

    def list_trades(
        self,
        start_time: str | None = None,
        end_time: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
        market_symbol: str | None = None,
    ) -> list[Trade]:
        params = {
            "start_time": start_time,
            "end_time": end_time,
            "page": page,
            "page_size": page_size,
            "market_symbol": market_symbol,
        }
        return self._call_list(Endpoint(HttpMethod.GET, "/trades", params=params, private=True), Trade)
