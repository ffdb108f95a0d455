"""Deposit-then-split-withdraw transfer orchestration.

A transfer deposits the full amount into the shielded pool once, then pays
each recipient an even share through separate withdrawals:

    Idle -> Validating -> Depositing -> Withdrawing -> Completed
                   |            |                   -> PartialFailure
                   v            v                   -> Failed
                Aborted       Failed

Validation finishes before any pool call. Once the deposit lands the funds
are committed, so every recipient is attempted even if an earlier one
fails, and the outcome of each is reported.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from ..config import Settings
from ..constants import DEFAULT_TOKEN_SETTLE_DELAY_SECONDS
from ..exceptions import (
    DepositFailed,
    EncryptionNotInitialized,
    InvalidAmount,
    InvalidArgument,
    WithdrawFailed,
)
from ..pool import ShieldedPoolClient, normalize_reference
from ..session import KeySession
from ..tokens import Token, require_token, to_base_units
from ..utils import validate_svm_address
from ..wallet import WalletSigner
from .types import (
    OutcomeStatus,
    OverallStatus,
    TransferOutcome,
    TransferRequest,
    TransferResult,
    TransferState,
    calculate_even_split,
    overall_status_for,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[str, TransferState], None]

_TERMINAL_STATES = {
    OverallStatus.COMPLETED: TransferState.COMPLETED,
    OverallStatus.PARTIAL: TransferState.PARTIAL_FAILURE,
    OverallStatus.FAILED: TransferState.FAILED,
    OverallStatus.ABORTED: TransferState.ABORTED,
}


class TransferOrchestrator:
    """Runs shielded transfers against a pool client.

    Args:
        pool: Shielded pool capability.
        token_settle_delay: Seconds to wait between a token deposit and the
            first withdrawal, so the deposit is observable. Not applied to SOL.
        address_validator: Recipient address check.
        on_state: Optional callback, called as ``on_state(attempt_id, state)``.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        pool: ShieldedPoolClient,
        *,
        token_settle_delay: float = DEFAULT_TOKEN_SETTLE_DELAY_SECONDS,
        address_validator: Callable[[str], bool] = validate_svm_address,
        on_state: StateListener | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._pool = pool
        self._token_settle_delay = token_settle_delay
        self._address_validator = address_validator
        self._on_state = on_state
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        pool: ShieldedPoolClient,
        settings: Settings,
        **kwargs: Any,
    ) -> "TransferOrchestrator":
        """Build an orchestrator using ``settings.token_settle_delay_seconds``."""
        return cls(pool, token_settle_delay=settings.token_settle_delay_seconds, **kwargs)

    async def transfer(
        self,
        request: TransferRequest,
        session: KeySession | None,
        wallet: WalletSigner,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TransferResult:
        """Deposit the total once and withdraw an even split to each recipient.

        Args:
            request: What to pay and to whom.
            session: The payer's key session. Required.
            wallet: The payer's wallet, used to sign pool transactions.
            cancel_event: If set before the deposit starts, the attempt is
                aborted with no side effects. Ignored once the deposit is made.

        Returns:
            TransferResult with per-recipient outcomes.

        Raises:
            EncryptionNotInitialized: If ``session`` is None.
            InvalidArgument: If the request fails validation.
        """
        attempt_id = uuid4().hex
        self._transition(attempt_id, TransferState.IDLE)
        self._transition(attempt_id, TransferState.VALIDATING)

        try:
            token, total = self._validate(request, session, wallet)
        except (EncryptionNotInitialized, InvalidArgument) as exc:
            logger.info("Transfer %s rejected: %s", attempt_id, exc)
            self._transition(attempt_id, TransferState.ABORTED)
            raise

        splits = calculate_even_split(total, request.recipients)
        result = TransferResult(
            attempt_id=attempt_id,
            token=token.symbol,
            recipients=list(request.recipients),
            total_base_units=total,
            split_base_units=splits[0][1],
            overall_status=OverallStatus.ABORTED,
        )

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Transfer %s aborted before deposit", attempt_id)
            return self._finish(result)

        self._transition(attempt_id, TransferState.DEPOSITING)
        logger.info(
            "Transfer %s depositing %s base units of %s for %d recipient(s)",
            attempt_id,
            total,
            token.symbol,
            len(splits),
        )
        try:
            raw_reference = await self._deposit(token, total, session, wallet)
            result.deposit_reference = normalize_reference(raw_reference)
        except Exception as exc:
            error = DepositFailed(f"Deposit of {total} base units of {token.symbol} failed: {exc}")
            error.__cause__ = exc
            logger.error("Transfer %s deposit failed: %s", attempt_id, exc)
            result.deposit_reference = None
            result.error = error
            result.overall_status = OverallStatus.FAILED
            return self._finish(result)

        logger.info("Transfer %s deposit settled reference=%s", attempt_id, result.deposit_reference)

        # Funds are committed: finish the withdrawals even if the caller is cancelled
        task = asyncio.ensure_future(self._withdraw_all(result, token, splits, session, wallet))
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.warning(
                "Transfer %s cancelled after deposit, finishing withdrawals", attempt_id
            )
            while not task.done():
                try:
                    await asyncio.shield(task)
                except asyncio.CancelledError:
                    continue
            task.result()
        return result

    def _validate(
        self,
        request: TransferRequest,
        session: KeySession | None,
        wallet: WalletSigner,
    ) -> tuple[Token, int]:
        if session is None:
            raise EncryptionNotInitialized("Initialize encryption before transferring")
        if wallet.address != session.address:
            raise InvalidArgument("Key session belongs to a different wallet")

        request.validate(self._address_validator)
        token = require_token(request.token)

        total = to_base_units(request.total_amount, token.decimals)
        if total < len(request.recipients):
            raise InvalidAmount(
                f"Amount {request.total_amount} {token.symbol} is too small to split "
                f"across {len(request.recipients)} recipient(s)"
            )
        return token, total

    async def _withdraw_all(
        self,
        result: TransferResult,
        token: Token,
        splits: list[tuple[str, int]],
        session: KeySession,
        wallet: WalletSigner,
    ) -> None:
        if not token.is_native and self._token_settle_delay > 0:
            await self._sleep(self._token_settle_delay)

        self._transition(result.attempt_id, TransferState.WITHDRAWING)
        for index, (recipient, amount) in enumerate(splits):
            try:
                raw_reference = await self._withdraw(token, amount, recipient, session, wallet)
                reference = normalize_reference(raw_reference)
            except Exception as exc:
                error = WithdrawFailed(recipient, f"Withdrawal to {recipient} failed: {exc}")
                error.__cause__ = exc
                logger.warning(
                    "Transfer %s withdrawal %d/%d to %s failed: %s",
                    result.attempt_id,
                    index + 1,
                    len(splits),
                    recipient,
                    exc,
                )
                result.per_recipient.append(
                    TransferOutcome(
                        recipient=recipient,
                        status=OutcomeStatus.FAILURE,
                        amount_base_units=amount,
                        error_detail=str(exc),
                        error=error,
                    )
                )
                continue

            logger.info(
                "Transfer %s withdrawal %d/%d to %s settled reference=%s",
                result.attempt_id,
                index + 1,
                len(splits),
                recipient,
                reference,
            )
            result.per_recipient.append(
                TransferOutcome(
                    recipient=recipient,
                    status=OutcomeStatus.SUCCESS,
                    amount_base_units=amount,
                    settlement_reference=reference,
                )
            )

        result.overall_status = overall_status_for(result.per_recipient)
        self._finish(result)

    async def _deposit(
        self,
        token: Token,
        amount: int,
        session: KeySession,
        wallet: WalletSigner,
    ) -> Any:
        if token.is_native:
            return await self._pool.deposit(
                amount,
                payer=session.address,
                signer=wallet,
                encryption_key=session.encryption_key,
            )
        return await self._pool.deposit_token(
            token.mint,
            amount,
            payer=session.address,
            signer=wallet,
            encryption_key=session.encryption_key,
        )

    async def _withdraw(
        self,
        token: Token,
        amount: int,
        recipient: str,
        session: KeySession,
        wallet: WalletSigner,
    ) -> Any:
        if token.is_native:
            return await self._pool.withdraw(
                amount,
                recipient,
                payer=session.address,
                signer=wallet,
                encryption_key=session.encryption_key,
            )
        return await self._pool.withdraw_token(
            token.mint,
            amount,
            recipient,
            payer=session.address,
            signer=wallet,
            encryption_key=session.encryption_key,
        )

    def _finish(self, result: TransferResult) -> TransferResult:
        if result.overall_status is not OverallStatus.ABORTED:
            logger.info(
                "Transfer %s finished status=%s succeeded=%d/%d undistributed=%s",
                result.attempt_id,
                result.overall_status.value,
                sum(1 for o in result.per_recipient if o.succeeded),
                len(result.recipients),
                result.undistributed_base_units,
            )
        self._transition(result.attempt_id, _TERMINAL_STATES[result.overall_status])
        return result

    def _transition(self, attempt_id: str, state: TransferState) -> None:
        logger.debug("Transfer %s -> %s", attempt_id, state.value)
        if self._on_state is not None:
            self._on_state(attempt_id, state)
