"""Runner utilities that wire the DCA engine from a config mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from aleo_client.ans import AnsClient
from aleo_client.async_rest import AsyncRestClient
from aleo_client.bridge import BridgeClient
from aleo_client.constants import (
    ANS_URL,
    BLOCK_POLL_INTERVAL_SEC,
    DCA_PROGRAM_ID,
    DEFAULT_CHAIN_ID,
    DEFAULT_FEE_MICROCREDITS,
    DEFAULT_NETWORK,
    EXPLORER_URL,
    VERULINK_URL,
)
from aleo_client.network import AleoNetworkClient
from engine.block_poller import BlockHeightPoller
from engine.custody import CustodyClient, DryRunWallet
from engine.dca_manager import DcaManager
from engine.worker import WorkerService, build_dca_handlers

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "positions.json"


def build_rest_client(
    config: Mapping[str, Any], url_key: str, default_url: str, *, retries: int
) -> AsyncRestClient:
    return AsyncRestClient(
        base_url=str(config.get(url_key, default_url)),
        timeout=float(config.get("request_timeout_sec", 10.0)),
        max_retries=int(config.get("request_retries", retries)),
    )


def build_network_client(config: Mapping[str, Any]) -> AleoNetworkClient:
    return AleoNetworkClient(
        build_rest_client(config, "explorer_url", EXPLORER_URL, retries=3),
        network=str(config.get("network", DEFAULT_NETWORK)),
    )


def build_ans_client(config: Mapping[str, Any]) -> AnsClient:
    return AnsClient(build_rest_client(config, "ans_url", ANS_URL, retries=0))


def build_bridge_client(config: Mapping[str, Any]) -> BridgeClient:
    return BridgeClient(
        build_rest_client(config, "bridge_url", VERULINK_URL, retries=0)
    )


def resolve_state_path(
    config: Mapping[str, Any], state_path: str | Path | None, base_dir: Path
) -> Path:
    if state_path:
        return Path(state_path).expanduser()
    if config.get("state_path"):
        return Path(str(config["state_path"])).expanduser()
    return base_dir / DEFAULT_STATE_FILE


@dataclass
class DcaRuntime:
    manager: DcaManager
    worker: WorkerService
    network: AleoNetworkClient
    poller: BlockHeightPoller

    async def start(self) -> None:
        await self.worker.start()

    async def close(self) -> None:
        await self.poller.stop()
        await self.worker.stop()
        await self.network.close()

    async def current_height(self, override: int | None = None) -> int:
        if override is not None:
            return override
        height = await self.poller.poll_once()
        if height is None:
            raise RuntimeError(
                f"Block height unavailable: {self.poller.last_error or 'no response'}"
            )
        return height


def build_runtime(
    config: Mapping[str, Any],
    owner: str,
    state_path: Path,
    *,
    custody: CustodyClient | None = None,
    network: AleoNetworkClient | None = None,
) -> DcaRuntime:
    network = network or build_network_client(config)
    custody = custody or DryRunWallet()
    program_id = str(config.get("program_id", DCA_PROGRAM_ID))
    worker = WorkerService(build_dca_handlers(custody, network, program_id=program_id))
    manager = DcaManager(
        worker,
        owner,
        state_path=state_path,
        fee=int(config.get("fee", DEFAULT_FEE_MICROCREDITS)),
        fee_private=bool(config.get("fee_private", False)),
        program_id=program_id,
        chain_id=str(config.get("chain_id", DEFAULT_CHAIN_ID)),
    )
    poller = BlockHeightPoller(
        worker,
        interval_sec=float(config.get("poll_interval_sec", BLOCK_POLL_INTERVAL_SEC)),
    )
    poller.add_listener(manager.observe_height)
    return DcaRuntime(manager=manager, worker=worker, network=network, poller=poller)


async def watch_positions(
    runtime: DcaRuntime, *, max_polls: int | None = None
) -> None:
    """Run the block poller and report positions as they become due."""
    reported: set[tuple[str, int]] = set()

    def report_due(height: int) -> None:
        for position in runtime.manager.due_positions(height):
            key = (position.id, position.next_execution_height)
            if key in reported:
                continue
            reported.add(key)
            LOGGER.info(
                "Position %s is due (next execution block %s, height %s)",
                position.id,
                position.next_execution_height,
                height,
            )
        runtime.manager.save()

    runtime.poller.add_listener(report_due)
    runtime.poller.start(max_polls=max_polls)
    try:
        await runtime.poller.wait()
    finally:
        await runtime.poller.stop()
