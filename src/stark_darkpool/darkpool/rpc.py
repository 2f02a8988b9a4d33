"""
VerifierClient: read-only Starknet JSON-RPC client for the dark pool verifier.

Only `starknet_call` and `starknet_blockNumber` are used. Nothing here signs
or submits transactions; phase changes are observed, never driven.

Entry points are addressed by selector = keccak256(name) & (2^250 - 1),
the Starknet convention.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from Crypto.Hash import keccak

from stark_darkpool.config import SECONDS_PER_BLOCK, DarkPoolConfig
from stark_darkpool.crypto.elgamal import Ciphertext, felts_to_ciphertext
from stark_darkpool.crypto.transcript import join_u256, split_u256, to_felt_hex
from stark_darkpool.darkpool.models import EpochInfo, EpochPhase, EpochResult, OrderPhase, OrderView, Side
from stark_darkpool.errors import PhaseViolationError, VerifierRpcError

logger = logging.getLogger("stark_darkpool.rpc")

SELECTOR_MASK = (1 << 250) - 1
PHASES_PER_EPOCH = 3


def get_selector_from_name(name: str) -> int:
    """Starknet entry point selector: keccak256(name) truncated to 250 bits."""
    digest = keccak.new(digest_bits=256)
    digest.update(name.encode("ascii"))
    return int(digest.hexdigest(), 16) & SELECTOR_MASK


def parse_order_id_from_receipt(receipt: dict[str, Any]) -> int | None:
    """
    Extract the order id from an OrderCommitted event in a tx receipt.

    Event keys are [selector, order_id_low, order_id_high, trader]. Returns
    None when no such event is present.
    """
    selector = get_selector_from_name("OrderCommitted")
    for event in receipt.get("events") or []:
        keys = event.get("keys") or []
        if len(keys) < 3:
            continue
        try:
            if int(keys[0], 16) != selector:
                continue
            order_id = join_u256(keys[1], keys[2])
        except ValueError:
            # Malformed event keys
            continue
        if order_id > 0:
            return order_id
    return None


class VerifierClient:
    """
    Synchronous reader for the verifier contract.

    Usage:
        with VerifierClient.from_config(DarkPoolConfig.from_env()) as client:
            info = client.get_epoch_info()
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        timeout: float = 15.0,
        poll_interval: float = 4.0,
        default_epoch_duration: int = 50,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.rpc_url = rpc_url
        self.contract_address = to_felt_hex(contract_address)
        self.poll_interval = poll_interval
        self.default_epoch_duration = default_epoch_duration
        self._sleep = sleep
        self._ids = itertools.count(1)
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: DarkPoolConfig, **kwargs: Any) -> VerifierClient:
        return cls(
            rpc_url=config.rpc_url,
            contract_address=config.contract_address,
            timeout=config.timeout,
            poll_interval=config.poll_interval,
            default_epoch_duration=config.epoch_duration,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Epoch
    # ------------------------------------------------------------------

    def get_block_number(self) -> int:
        return int(self._rpc("starknet_blockNumber", []))

    def get_current_epoch(self) -> int:
        return self._call_int("get_current_epoch")

    def get_epoch_phase(self) -> EpochPhase:
        return EpochPhase.from_index(self._call_int("get_epoch_phase"))

    def get_epoch_duration(self) -> int:
        """
        Blocks per phase. Older deployments have no get_epoch_duration view;
        those fall back to the configured default.
        """
        try:
            duration = self._call_int("get_epoch_duration")
        except VerifierRpcError as err:
            logger.warning("get_epoch_duration unavailable, using default %d: %s",
                           self.default_epoch_duration, err)
            return self.default_epoch_duration
        return duration or self.default_epoch_duration

    def get_epoch_info(self) -> EpochInfo:
        """
        Current epoch, phase and an estimate of the blocks left in the phase.

        The verifier computes phase = ((block - genesis) % (3·d)) // d, so the
        genesis block is recovered from the epoch number and phase index.
        """
        epoch = self.get_current_epoch()
        phase = self.get_epoch_phase()
        current_block = self.get_block_number()
        duration = self.get_epoch_duration()

        phase_index = list(EpochPhase).index(phase)
        total_epoch_blocks = PHASES_PER_EPOCH * duration
        phase_offset = phase_index * duration
        genesis_block = (
            current_block - (epoch * total_epoch_blocks + phase_offset + 1) if epoch > 0 else 0
        )
        blocks_since_epoch_start = (current_block - genesis_block) % total_epoch_blocks
        blocks_into_phase = blocks_since_epoch_start - phase_offset
        blocks_remaining = max(0, duration - max(0, blocks_into_phase)) or 1

        return EpochInfo(
            epoch=epoch,
            phase=phase,
            genesis_block=genesis_block,
            epoch_duration=duration,
            current_block=current_block,
            blocks_in_phase=duration,
            blocks_remaining=blocks_remaining,
            seconds_remaining=blocks_remaining * SECONDS_PER_BLOCK,
        )

    def get_epoch_result(self, epoch_id: int) -> EpochResult:
        # EpochResult: epoch_id, clearing_price (u256), total_buy (u256),
        # total_sell (u256), num_fills, settled_at
        r = self._call("get_epoch_result", [to_felt_hex(epoch_id)])
        self._require_length("get_epoch_result", r, 9)
        return EpochResult(
            epoch_id=int(r[0], 16),
            clearing_price=join_u256(r[1], r[2]),
            total_buy_filled=join_u256(r[3], r[4]),
            total_sell_filled=join_u256(r[5], r[6]),
            num_fills=int(r[7], 16),
            settled_at=int(r[8], 16),
        )

    def wait_for_phase(
        self,
        target: EpochPhase,
        epoch: int | None = None,
        timeout: float = 600.0,
    ) -> EpochInfo:
        """
        Poll until the verifier reports `target` (in `epoch`, if given).

        Raises:
            PhaseViolationError: If the phase is not reached within `timeout`
                seconds, or `epoch` has already passed.
        """
        attempts = max(1, int(timeout / self.poll_interval))
        info = self.get_epoch_info()
        for attempt in range(attempts):
            if epoch is not None and info.epoch > epoch:
                raise PhaseViolationError(
                    f"Epoch {epoch} has already ended (verifier is at epoch {info.epoch})",
                    expected=target.value,
                    actual=info.phase.value,
                )
            if info.phase == target and (epoch is None or info.epoch == epoch):
                return info
            logger.debug("Waiting for %s: epoch %d is in %s (poll %d/%d)",
                         target.value, info.epoch, info.phase.value, attempt + 1, attempts)
            self._sleep(self.poll_interval)
            info = self.get_epoch_info()

        if info.phase == target and (epoch is None or info.epoch == epoch):
            return info
        raise PhaseViolationError(
            f"Timed out after {timeout}s waiting for the {target.value} phase",
            expected=target.value,
            actual=info.phase.value,
        )

    # ------------------------------------------------------------------
    # Orders & balances
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> OrderView:
        # OrderView: order_id (u256), trader, side, give_asset, want_asset,
        # epoch, status, price (u256), amount (u256), fill_amount (u256)
        r = self._call("get_order", [hex(x) for x in split_u256(order_id)])
        self._require_length("get_order", r, 14)
        try:
            return OrderView(
                order_id=join_u256(r[0], r[1]),
                trader=to_felt_hex(r[2]),
                side=Side(int(r[3], 16)),
                give_asset=to_felt_hex(r[4]),
                want_asset=to_felt_hex(r[5]),
                epoch=int(r[6], 16),
                status=OrderPhase.from_index(int(r[7], 16)),
                price=join_u256(r[8], r[9]),
                amount=join_u256(r[10], r[11]),
                fill_amount=join_u256(r[12], r[13]),
            )
        except ValueError as err:
            raise VerifierRpcError(f"Malformed get_order result: {err}") from err

    def is_order_claimed(self, order_id: int) -> bool:
        r = self._call("is_order_claimed", [hex(x) for x in split_u256(order_id)])
        self._require_length("is_order_claimed", r, 1)
        return int(r[0], 16) != 0

    def get_encrypted_balance(self, trader: str, asset_id: int | str) -> Ciphertext | None:
        """The trader's encrypted balance of `asset_id`, or None if empty."""
        r = self._call("get_encrypted_balance", [to_felt_hex(trader), to_felt_hex(asset_id)])
        self._require_length("get_encrypted_balance", r, 4)
        return felts_to_ciphertext(r[:4])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call(self, entrypoint: str, calldata: list[str] | None = None) -> list[str]:
        params = {
            "request": {
                "contract_address": self.contract_address,
                "entry_point_selector": hex(get_selector_from_name(entrypoint)),
                "calldata": calldata or [],
            },
            "block_id": "latest",
        }
        result = self._rpc("starknet_call", params)
        if not isinstance(result, list):
            raise VerifierRpcError(f"{entrypoint}: expected a felt array, got {result!r}")
        return result

    def _call_int(self, entrypoint: str) -> int:
        r = self._call(entrypoint)
        self._require_length(entrypoint, r, 1)
        return int(r[0], 16)

    def _rpc(self, method: str, params: Any) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("RPC %s -> %s", method, self.rpc_url)
        try:
            response = self._client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as err:
            raise VerifierRpcError(f"RPC transport error for {method}: {err}") from err
        if response.status_code != 200:
            raise VerifierRpcError(f"RPC error {response.status_code} for {method}: {response.text}")

        try:
            data = response.json()
        except ValueError as err:
            raise VerifierRpcError(f"RPC returned a non-JSON body for {method}: {response.text[:200]}") from err
        if not isinstance(data, dict):
            raise VerifierRpcError(f"RPC returned an unexpected payload for {method}: {data!r}")
        if "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                raise VerifierRpcError(
                    f"{method} failed: {error.get('message', error)} (code {error.get('code')})"
                )
            raise VerifierRpcError(f"{method} failed: {error}")
        return data.get("result")

    @staticmethod
    def _require_length(entrypoint: str, result: list[str], length: int) -> None:
        if len(result) < length:
            raise VerifierRpcError(f"{entrypoint}: expected {length} felts, got {len(result)}")

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> VerifierClient:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()
