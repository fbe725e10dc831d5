"""
Sweep Orchestrator

Runs one sweep attempt end to end against the execution relay:

    idle → quote → awaiting-signature → executing → success | error

Each account version owns its own SweepExecution, so a V1 and a V2 sweep can
be in flight together while attempts for the same version are serialized.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set, Union

from ..accounts.models import NexusAccount
from ..chains import ChainRegistry, get_chain_registry, rpc_url
from ..errors import (
    ChainSwitchError,
    ErrorCategory,
    ExecutionError,
    QuoteError,
    ReceiptStatusError,
    SignatureError,
    SweeperError,
    ValidationError,
    describe_error,
)
from ..tokens.models import ManualTokenEntry, SweepToken, TokenRecord
from ..tokens.normalizer import normalize_sweep_set
from ...config import settings
from ...logging_config import bind_sweep_context, clear_sweep_context
from ...providers.base import ExecutionRelay, Signer
from ...types import (
    AccountVersion,
    ChainConfiguration,
    FeeTokenConfig,
    Instruction,
    QuoteRequest,
    SupertransactionReceipt,
    TriggerConfig,
)
from .fees import FeeStrategySelector
from .history import SweepHistoryStore
from .instructions import InstructionBuilder
from .models import (
    FeeMode,
    FeeSelection,
    SweepExecution,
    SweepHistoryEntry,
    SweepOutcome,
    SweepRequest,
    SweepResult,
    SweepState,
    now_ms,
)
from .state_machine import SweepStateMachine

logger = logging.getLogger(__name__)

NO_TOKENS_MESSAGE = "No tokens to sweep"
CHAIN_SWITCH_FAILED_MESSAGE = "Failed to switch network. Please try again."
SWEEP_BUSY_MESSAGE = "A sweep for this account is already in progress."

SweepRecord = Union[TokenRecord, ManualTokenEntry]
RefreshCallback = Callable[[], Awaitable[None]]


class SweepOrchestrator:
    """
    Owns the per-version execution registry and drives the sweep protocol.

    Timing knobs default to settings; tests pass zero delays.
    """

    def __init__(
        self,
        relay: ExecutionRelay,
        history: SweepHistoryStore,
        builder: Optional[InstructionBuilder] = None,
        fee_selector: Optional[FeeStrategySelector] = None,
        registry: Optional[ChainRegistry] = None,
        *,
        settle_delay: Optional[float] = None,
        poll_attempts: Optional[int] = None,
        poll_interval: Optional[float] = None,
        refresh_delay: Optional[float] = None,
        alchemy_api_key: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.relay = relay
        self.history = history
        self.registry = registry or get_chain_registry()
        self.builder = builder or InstructionBuilder(registry=self.registry)
        self.fee_selector = fee_selector or FeeStrategySelector(self.registry)

        self.settle_delay = settings.sweep_settle_delay_seconds if settle_delay is None else settle_delay
        self.poll_attempts = poll_attempts or settings.receipt_poll_attempts
        self.poll_interval = settings.receipt_poll_interval_seconds if poll_interval is None else poll_interval
        self.refresh_delay = settings.token_refresh_delay_seconds if refresh_delay is None else refresh_delay
        self._alchemy_api_key = settings.alchemy_api_key if alchemy_api_key is None else alchemy_api_key
        self._sleep = sleep

        self.executions: Dict[AccountVersion, SweepExecution] = {
            version: SweepExecution(account_version=version) for version in AccountVersion
        }
        self._locks: Dict[AccountVersion, asyncio.Lock] = {
            version: asyncio.Lock() for version in AccountVersion
        }
        self._refresh_tasks: Set[asyncio.Task] = set()

    # =========================================================================
    # Registry
    # =========================================================================

    def execution_for(self, version: AccountVersion) -> SweepExecution:
        return self.executions[version]

    def is_busy(self, version: AccountVersion) -> bool:
        return self._locks[version].locked() or self.executions[version].is_in_progress

    @property
    def is_any_busy(self) -> bool:
        return any(self.is_busy(version) for version in AccountVersion)

    def reset(self, version: Optional[AccountVersion] = None) -> None:
        """Return one version, or every version, to a fresh idle execution."""
        versions = [version] if version is not None else list(AccountVersion)
        for item in versions:
            if self._locks[item].locked():
                logger.warning(f"Not resetting {item.value}: sweep in progress")
                continue
            self.executions[item] = SweepExecution(account_version=item)

    # =========================================================================
    # Sweep
    # =========================================================================

    async def sweep(
        self,
        version: AccountVersion,
        signer: Optional[Signer],
        account_address: Optional[str],
        records: Sequence[SweepRecord],
        fee_token: Optional[SweepRecord] = None,
        *,
        on_refresh: Optional[RefreshCallback] = None,
    ) -> SweepResult:
        """
        Sweep ``records`` out of the version's smart account into the signer's wallet.

        ``fee_token`` is the EOA fee-token pick; it is only used when the fee
        mode is externally funded.
        """
        lock = self._locks[version]
        if lock.locked():
            logger.warning(f"Rejected {version.value} sweep: another attempt is in progress")
            return SweepResult(
                outcome=SweepOutcome.BUSY,
                execution=self.executions[version],
                message=SWEEP_BUSY_MESSAGE,
            )

        async with lock:
            execution = SweepExecution(account_version=version)
            self.executions[version] = execution
            machine = SweepStateMachine(execution)

            bind_sweep_context(sweep_version=version.value, sweep_id=execution.execution_id)
            try:
                return await self._run(machine, signer, account_address, records, fee_token, on_refresh)
            finally:
                clear_sweep_context("sweep_version", "sweep_id")

    async def _run(
        self,
        machine: SweepStateMachine,
        signer: Optional[Signer],
        account_address: Optional[str],
        records: Sequence[SweepRecord],
        fee_token: Optional[SweepRecord],
        on_refresh: Optional[RefreshCallback],
    ) -> SweepResult:
        execution = machine.execution
        version = execution.account_version

        # Preconditions: failures leave the execution idle
        try:
            request = await self._prepare(version, signer, account_address, records, fee_token)
        except ValidationError as e:
            execution.error = e.message
            execution.error_category = e.category
            logger.info(f"{version.value} sweep not started: {e.message}")
            return SweepResult(outcome=SweepOutcome.NOT_STARTED, execution=execution, message=e.message)

        execution.fee_mode = request.fee.mode
        execution.token_count = len(request.tokens)

        try:
            machine.transition_to(SweepState.QUOTE, reason="Sweep started")

            if request.fee.mode == FeeMode.EXTERNALLY_FUNDED:
                if await self._ensure_fee_chain(signer, request.fee):
                    machine.return_to_idle(f"Switched wallet to chain {request.fee.chain_id}")
                    return SweepResult(
                        outcome=SweepOutcome.CHAIN_SWITCHED,
                        execution=execution,
                        message=f"Switched to {self.registry.chain_name(request.fee.chain_id)}. "
                                f"Sweep again to continue.",
                    )

            account = NexusAccount.on_chains(
                version,
                request.source_address,
                self._chain_ids(request.tokens),
            )
            instructions = self.builder.build(account, request.destination_address, request.tokens)
            if not instructions:
                raise ValidationError(NO_TOKENS_MESSAGE)
            execution.instruction_batch = instructions

            quote_request = self._quote_request(request, account, instructions)
            tx_hash = await self._quote_sign_execute(machine, quote_request, signer)

            execution.transaction_hash = tx_hash
            logger.info(f"{version.value} supertransaction submitted: {tx_hash}")

            await self._confirm(machine, tx_hash)
        except Exception as e:
            message = describe_error(e)
            category = e.category if isinstance(e, SweeperError) else ErrorCategory.PROVIDER
            logger.error(f"{version.value} sweep failed: {message}")
            machine.fail(message, category)
            return SweepResult(outcome=SweepOutcome.FAILED, execution=execution, message=message)

        machine.succeed()
        await self.history.append(
            SweepHistoryEntry(
                hash=execution.transaction_hash,
                timestamp=now_ms(),
                token_count=execution.token_count,
                account_version=version,
            )
        )
        if on_refresh is not None:
            execution.refresh_task = self._schedule_refresh(on_refresh)

        return SweepResult(outcome=SweepOutcome.SUCCESS, execution=execution)

    async def _prepare(
        self,
        version: AccountVersion,
        signer: Optional[Signer],
        account_address: Optional[str],
        records: Sequence[SweepRecord],
        fee_token: Optional[SweepRecord],
    ) -> SweepRequest:
        if signer is None:
            raise ValidationError("Please connect a wallet.")
        if not account_address:
            raise ValidationError("Smart account not resolved.")

        sweep_set = normalize_sweep_set(records, self.registry)
        if not sweep_set:
            raise ValidationError(NO_TOKENS_MESSAGE)

        try:
            destination = await signer.get_address()
        except Exception as e:
            raise ValidationError("Please connect a wallet.", details={"reason": str(e)}) from e

        request = SweepRequest(
            account_version=version,
            source_address=account_address,
            destination_address=destination,
            tokens=[token for _, token in sweep_set],
        )
        request.validate()
        # Fee mode and token come from the sweep set, not the raw records
        request.fee = self.fee_selector.select(version, [record for record, _ in sweep_set], fee_token)
        return request

    def _chain_ids(self, tokens: Sequence[SweepToken]) -> List[int]:
        seen: List[int] = []
        for token in tokens:
            if self.registry.is_supported(token.chain_id) and token.chain_id not in seen:
                seen.append(token.chain_id)
        return seen

    async def _ensure_fee_chain(self, signer: Signer, fee: FeeSelection) -> bool:
        """Ask the wallet to move to the fee token's chain. Returns True when a switch happened."""
        current_chain = await signer.get_chain_id()
        if current_chain == fee.chain_id:
            return False

        logger.info(f"Requesting chain switch {current_chain} -> {fee.chain_id}")
        try:
            switched = await signer.switch_chain(fee.chain_id)
        except Exception as e:
            raise ChainSwitchError(
                CHAIN_SWITCH_FAILED_MESSAGE,
                details={"chain_id": fee.chain_id, "reason": str(e)},
            ) from e
        if not switched:
            raise ChainSwitchError(CHAIN_SWITCH_FAILED_MESSAGE, details={"chain_id": fee.chain_id})
        return True

    def _quote_request(
        self,
        request: SweepRequest,
        account: NexusAccount,
        instructions: List[Instruction],
    ) -> QuoteRequest:
        fee = request.fee
        fee_config = FeeTokenConfig(address=fee.token_address, chain_id=fee.chain_id)
        trigger = None
        if fee.mode == FeeMode.EXTERNALLY_FUNDED:
            # The fee token doubles as the on-chain trigger
            trigger = TriggerConfig(chain_id=fee.chain_id, token_address=fee.token_address, amount=1)

        return QuoteRequest(
            account_address=account.address,
            owner_address=request.destination_address,
            version=request.account_version,
            instructions=instructions,
            fee_token=fee_config,
            trigger=trigger,
            chain_configurations=[
                ChainConfiguration(
                    chain_id=chain_id,
                    rpc_url=rpc_url(chain_id, self._alchemy_api_key),
                    version=request.account_version,
                )
                for chain_id in sorted(account.chain_ids)
            ],
        )

    async def _quote_sign_execute(
        self,
        machine: SweepStateMachine,
        quote_request: QuoteRequest,
        signer: Signer,
    ) -> str:
        """
        Quote, sign and submit; returns the supertransaction hash.

        Self-funded quotes are signed and submitted by one relay call, so a
        rejected signature there surfaces as ExecutionError (category
        ``execution``), with the wallet's message kept verbatim. Only the
        externally-funded path reports rejections as SignatureError.
        """
        execution = machine.execution

        if execution.fee_mode == FeeMode.SELF_FUNDED:
            try:
                quote = await self.relay.get_quote(quote_request)
            except Exception as e:
                raise QuoteError(describe_error(e)) from e
            execution.quote = quote

            # Signing and submission are a single relay call in this mode
            machine.transition_to(SweepState.AWAITING_SIGNATURE, reason=f"Quote {quote.hash}")
            try:
                handle = await self.relay.execute_quote(quote, signer)
            except Exception as e:
                raise ExecutionError(describe_error(e)) from e
            machine.transition_to(SweepState.EXECUTING, reason="Supertransaction submitted")
            return handle.hash

        try:
            quote = await self.relay.get_on_chain_quote(quote_request)
        except Exception as e:
            raise QuoteError(describe_error(e)) from e
        execution.quote = quote

        machine.transition_to(SweepState.AWAITING_SIGNATURE, reason=f"On-chain quote {quote.hash}")
        try:
            signed = await self.relay.sign_on_chain_quote(quote, signer)
        except Exception as e:
            raise SignatureError(describe_error(e)) from e
        execution.signed_quote = signed

        machine.transition_to(SweepState.EXECUTING, reason="Quote signed")
        try:
            handle = await self.relay.execute_signed_quote(signed)
        except Exception as e:
            raise ExecutionError(describe_error(e)) from e
        return handle.hash

    async def _confirm(self, machine: SweepStateMachine, tx_hash: str) -> SupertransactionReceipt:
        """Wait the settling delay, then poll the receipt while it is still pending."""
        execution = machine.execution
        await self._sleep(self.settle_delay)

        status: Optional[str] = None
        for attempt in range(self.poll_attempts):
            if attempt:
                await self._sleep(self.poll_interval)
            try:
                receipt = await self.relay.get_receipt(tx_hash)
            except Exception as e:
                raise SweeperError(describe_error(e), category=ErrorCategory.RECEIPT) from e

            status = receipt.status
            execution.receipt_status = status
            if receipt.is_success:
                return receipt
            if not receipt.is_pending:
                raise ReceiptStatusError(status, tx_hash)
            logger.debug(f"Supertransaction {tx_hash} still {status} (attempt {attempt + 1}/{self.poll_attempts})")

        raise ReceiptStatusError(
            status or "UNKNOWN",
            tx_hash,
            message=f"Timed out waiting for confirmation (last status: {status or 'UNKNOWN'})",
        )

    # =========================================================================
    # Token refresh
    # =========================================================================

    def _schedule_refresh(self, on_refresh: RefreshCallback) -> asyncio.Task:
        task = asyncio.create_task(self._refresh_later(on_refresh))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def _refresh_later(self, on_refresh: RefreshCallback) -> None:
        await self._sleep(self.refresh_delay)
        try:
            await on_refresh()
        except Exception as e:
            logger.error(f"Token refresh after sweep failed: {e}")
