from __future__ import annotations

"""
HTTP JSON-RPC gateway (sync).

- Speaks JSON-RPC 2.0 over httpx.
- Retries on transient transport failures and 429/5xx gateway statuses with
  jittered exponential backoff. JSON-RPC errors returned by the node are
  application errors and are never retried.
- `get_transaction_result(..., wait_for_seal=True)` polls until the node
  reports the transaction sealed or expired. There is no timeout at this layer.

RPC methods
-----------
    account.get       [address_hex]             -> AccountDict
    block.getLatest   [sealed: bool]            -> BlockDict
    tx.sendRaw        [raw_cbor_hex]            -> tx id hex
    tx.getResult      [tx_id_hex]               -> TransactionResultDict
    script.execute    [script_hex, [arg_json]]  -> arg_json

Example:
    from omni_deploy.gateway.http import HttpGateway
    gw = HttpGateway("http://localhost:8545")
    block = gw.get_latest_block()
    print(block.height)
"""

import json
import random
import time
from itertools import count
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

import httpx

from omni_deploy.address import Address
from omni_deploy.errors import RpcError
from omni_deploy.logging import get_logger
from omni_deploy.settings import Settings
from omni_deploy.tx.transaction import Transaction
from omni_deploy.types.core import Account, Block, TransactionResult
from omni_deploy.types.values import Argument, arguments_to_json
from omni_deploy.version import user_agent

JSON = Union[dict, list, str, int, float, bool, None]

_TRANSPORT_CODE = -32098
_INTERNAL_CODE = -32603


class _TransientError(Exception):
    """Transport-level failure worth retrying."""


def _is_retriable_http(status: int) -> bool:
    return status in (429, 502, 503, 504)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float, cap: float) -> float:
    return min(base * (factor ** max(attempt - 1, 0)), cap) + random.random() * jitter


class HttpGateway:
    """Synchronous JSON-RPC 2.0 gateway over HTTP."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_base: float = 0.2,
        backoff_factor: float = 1.8,
        backoff_jitter: float = 0.1,
        backoff_max: float = 2.0,
        poll_interval: float = 1.0,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.max_retries = int(max_retries)
        self.backoff_base = backoff_base
        self.backoff_factor = backoff_factor
        self.backoff_jitter = backoff_jitter
        self.backoff_max = backoff_max
        self.poll_interval = poll_interval
        self._ids: Iterator[int] = count(1)
        self._log = get_logger(__name__)

        merged: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if headers:
            merged.update(dict(headers))
        self._client = httpx.Client(timeout=timeout, headers=merged, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **kw: Any) -> "HttpGateway":
        return cls(
            settings.rpc_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            backoff_base=settings.backoff_initial,
            backoff_max=settings.backoff_max,
            poll_interval=settings.seal_poll_interval,
            **kw,
        )

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "HttpGateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        self._client.close()

    # --- gateway API -----------------------------------------------------

    def get_account(self, address: Address) -> Account:
        res = self.request("account.get", [str(address)])
        if not isinstance(res, dict):
            raise RpcError(f"account {address} not found", method="account.get", data=res)
        return Account.from_rpc_dict(res)  # type: ignore[arg-type]

    def get_latest_block(self) -> Block:
        res = self.request("block.getLatest", [True])
        if not isinstance(res, dict):
            raise RpcError("malformed block", method="block.getLatest", data=res)
        return Block.from_rpc_dict(res)  # type: ignore[arg-type]

    def send_signed_transaction(self, tx: Transaction) -> str:
        res = self.request("tx.sendRaw", [tx.encode().hex()])
        if not isinstance(res, str) or not res:
            raise RpcError("malformed transaction id", method="tx.sendRaw", data=res)
        return res[2:] if res.startswith(("0x", "0X")) else res

    def get_transaction_result(self, tx_id: str, wait_for_seal: bool = True) -> TransactionResult:
        while True:
            res = self.request("tx.getResult", [tx_id])
            if not isinstance(res, dict):
                raise RpcError(f"malformed result for tx {tx_id}", method="tx.getResult", data=res)
            result = TransactionResult.from_rpc_dict(res)  # type: ignore[arg-type]
            if result.final or not wait_for_seal:
                return result
            self._log.debug("tx_waiting_for_seal", tx_id=tx_id, status=result.status.name)
            time.sleep(self.poll_interval)

    def execute_script(self, script: bytes, args: Sequence[Argument] = ()) -> Any:
        res = self.request("script.execute", [bytes(script).hex(), arguments_to_json(args)])
        if isinstance(res, dict) and "type" in res:
            return Argument.from_json(res)
        return res

    # --- JSON-RPC --------------------------------------------------------

    def request(self, method: str, params: Optional[List[Any]] = None) -> JSON:
        """Perform a single JSON-RPC request and return `result` or raise RpcError."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params or [])}
        last_exc: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 2):  # N retries -> N+1 attempts
            try:
                return self._send_once(method, payload)
            except _TransientError as e:
                last_exc = e
                if attempt > self.max_retries:
                    break
                delay = _jitter_backoff(
                    self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter, self.backoff_max
                )
                self._log.warning("rpc_retry", method=method, attempt=attempt, delay=round(delay, 3), error=str(e))
                time.sleep(delay)
        raise RpcError("RPC transport failed", method=method, code=_TRANSPORT_CODE, data=str(last_exc)) from last_exc

    def _send_once(self, method: str, payload: Dict[str, Any]) -> JSON:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = self._client.post(self.url, content=body)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise _TransientError(f"network error: {e}") from e
        if _is_retriable_http(r.status_code):
            raise _TransientError(f"HTTP {r.status_code}")
        try:
            resp = r.json()
        except ValueError as e:
            raise RpcError(
                "non-JSON response from RPC",
                method=method,
                code=_INTERNAL_CODE,
                data=f"HTTP {r.status_code}: {r.text[:256]}",
            ) from e

        if not isinstance(resp, dict):
            raise RpcError("invalid JSON-RPC response type", method=method, code=_INTERNAL_CODE, data=type(resp).__name__)
        if resp.get("error") is not None:
            err = resp["error"] or {}
            raise RpcError(
                err.get("message", "unknown error"),
                method=method,
                code=err.get("code", _INTERNAL_CODE),
                data=err.get("data"),
            )
        if "result" not in resp:
            raise RpcError("malformed JSON-RPC response", method=method, code=_INTERNAL_CODE, data=resp)
        return resp["result"]


__all__ = ["HttpGateway"]
