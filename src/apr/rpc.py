"""JSON-RPC client for reading contract state with ``eth_call``.

Only two methods are needed: ``eth_blockNumber`` to pin the run to the chain
head and ``eth_call`` for every contract read. Transient transport faults
(timeouts and connection resets) are retried with exponential backoff; any
other failure of an ``eth_call`` is logged and resolves to ``None`` so callers
see a missing value instead of an exception.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Union

import requests
from eth_abi.exceptions import DecodingError
from prometheus_client import Counter

from .abi import get_function
from .config import Settings, settings as default_settings
from .errors import ContractCallError, TransientTransportError

logger = logging.getLogger(__name__)

BlockTag = Union[int, str]

RPC_CALL_COUNTER = Counter(
    "rpc_calls_total",
    "Total eth_call requests by function and outcome",
    ["function", "outcome"],
)
RPC_RETRY_COUNTER = Counter(
    "rpc_retries_total",
    "Total eth_call retries after a transient transport fault",
    ["function"],
)


def to_block_tag(block: BlockTag) -> str:
    """Return ``block`` in the form JSON-RPC expects (hex quantity or tag)."""
    if isinstance(block, int):
        return hex(block)
    return block


class RpcClient:
    def __init__(
        self,
        config: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or default_settings
        self.session = session or requests.Session()

    def _post(self, method: str, params: List[Any]) -> Any:
        payload = {"id": 1, "jsonrpc": "2.0", "method": method, "params": params}
        try:
            response = self.session.post(
                self.config.rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.config.rpc_timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise TransientTransportError(str(exc)) from exc
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise ContractCallError(method, self.config.rpc_url, "malformed response")
        error = body.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ContractCallError(method, self.config.rpc_url, str(message))
        return body.get("result")

    def _post_with_retry(self, method: str, params: List[Any], label: str) -> Any:
        attempts = max(1, self.config.rpc_max_attempts)
        delay = self.config.rpc_backoff_seconds
        attempt = 1
        while True:
            try:
                return self._post(method, params)
            except TransientTransportError as exc:
                if attempt >= attempts:
                    raise
                RPC_RETRY_COUNTER.labels(function=label).inc()
                logger.warning(
                    "rpc retry function=%s attempt=%s/%s error=%s",
                    label,
                    attempt,
                    attempts,
                    exc,
                )
                time.sleep(delay)
                delay *= 2
                attempt += 1

    def block_number(self) -> int:
        """Return the chain head height reported by the RPC endpoint.

        Unlike :meth:`call`, failures here propagate: without a pinned block
        there is nothing meaningful to compute.
        """
        url = self.config.rpc_url
        try:
            result = self._post_with_retry("eth_blockNumber", [], "eth_blockNumber")
        except (requests.RequestException, ValueError) as exc:
            raise ContractCallError(
                "eth_blockNumber", url, f"{type(exc).__name__}: {exc}"
            ) from exc
        if not isinstance(result, str):
            raise ContractCallError("eth_blockNumber", url, "empty result")
        try:
            return int(result, 16)
        except ValueError as exc:
            raise ContractCallError("eth_blockNumber", url, f"bad block number {result!r}") from exc

    def call(
        self,
        address: str,
        abi: Sequence[Dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
        block: BlockTag = "latest",
    ) -> Any:
        """Read ``function`` on the contract at ``address`` at ``block``.

        Returns the decoded value, a dict of named outputs for multi-value
        functions, or ``None`` when the call failed for any reason.
        """
        fn = get_function(abi, function)
        params = [{"to": address, "data": fn.encode_call(args)}, to_block_tag(block)]
        try:
            result = self._post_with_retry("eth_call", params, function)
            if not isinstance(result, str) or result == "0x":
                raise ContractCallError(function, address, "empty result")
            value = fn.decode_result(result)
        except TransientTransportError as exc:
            reason = f"retries exhausted: {exc}"
        except ContractCallError as exc:
            reason = exc.reason
        except (requests.RequestException, ValueError, DecodingError) as exc:
            reason = f"{type(exc).__name__}: {exc}"
        else:
            RPC_CALL_COUNTER.labels(function=function, outcome="success").inc()
            return value

        RPC_CALL_COUNTER.labels(function=function, outcome="failure").inc()
        logger.error(
            "error calling function %s for contract %s: %s", function, address, reason
        )
        return None

    async def acall(
        self,
        address: str,
        abi: Sequence[Dict[str, Any]],
        function: str,
        args: Sequence[Any] = (),
        block: BlockTag = "latest",
    ) -> Any:
        return await asyncio.to_thread(self.call, address, abi, function, args, block)

    async def ablock_number(self) -> int:
        return await asyncio.to_thread(self.block_number)
