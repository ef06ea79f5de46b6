"""
Optimistic quantity updates for a single cart line.

State machine per line:

    STABLE --request--> PENDING --success--> STABLE
                        PENDING --failure--> ROLLED_BACK --> STABLE

Every request gets a fresh token. Only the reply to the latest token may
move the line; replies to superseded requests are dropped. While a request
is pending, the baseline (last server-confirmed line) is left alone so a
rollback always lands on a quantity the server actually holds.

The baseline is stamped with the sequence number of the request that
confirmed it. A cart payload from a request sent earlier never replaces it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from storefront.config import GLOBAL_MAX_QUANTITY
from storefront.errors import UpstreamError
from storefront.features.cart.models import LineItem, parse_cart
from storefront.features.cart.quantity import (
    QuantityViolation,
    effective_max,
    validate_quantity,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Could not update quantity. Please try again."

SendQuantity = Callable[[str, int], Awaitable[Dict[str, Any]]]


class LineState(str, Enum):
    STABLE = "stable"
    PENDING = "pending"
    ROLLED_BACK = "rolled_back"


class OutcomeStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ROLLED_BACK = "rolled_back"
    STALE = "stale"


@dataclass(frozen=True)
class MutationOutcome:
    status: OutcomeStatus
    quantity: int
    payload: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    error_type: Optional[str] = None
    max_quantity: Optional[int] = None
    violation: Optional[QuantityViolation] = None
    needs_resync: bool = False
    seq: Optional[int] = None


def failure_details(error: Exception):
    """
    Human-readable reason for a failed update.

    Prefers the server's structured error (errorType/message/maxQuantity);
    anything else gets the generic retry message.

    Returns:
        (reason, error_type, max_quantity)
    """
    if isinstance(error, UpstreamError) and error.error_type:
        max_quantity = error.payload.get("maxQuantity")
        reason = error.server_message
        if not reason and max_quantity is not None:
            reason = f"Maximum available quantity is {max_quantity}"
        return reason or GENERIC_FAILURE_MESSAGE, error.error_type, max_quantity
    return GENERIC_FAILURE_MESSAGE, None, None


class CartItemMutator:
    """Owns the displayed quantity of one cart line."""

    def __init__(
        self,
        line: LineItem,
        send: SendQuantity,
        global_cap: int = GLOBAL_MAX_QUANTITY,
        on_transition: Optional[Callable[["CartItemMutator", LineState, LineState], None]] = None,
        next_seq: Optional[Callable[[], int]] = None,
        seq: int = 0,
    ):
        """
        Args:
            line: Server-confirmed line to start from
            send: Coroutine function persisting (item_id, quantity)
            global_cap: Per-line quantity cap
            on_transition: Called with (mutator, old_state, new_state)
            next_seq: Issues the sequence number for each outgoing request;
                shared with the owner's other cart requests
            seq: Sequence number of the request that produced `line`
        """
        self._stable = line
        self._stable_seq = seq
        self._local_quantity = line.quantity
        self._send = send
        self.global_cap = global_cap
        self._on_transition = on_transition
        self._next_seq = next_seq
        self._state = LineState.STABLE
        self._token = 0

    @property
    def item_id(self) -> str:
        return self._stable.id

    @property
    def state(self) -> LineState:
        return self._state

    @property
    def stable_line(self) -> LineItem:
        return self._stable

    @property
    def stable_quantity(self) -> int:
        return self._stable.quantity

    @property
    def stable_seq(self) -> int:
        return self._stable_seq

    @property
    def local_quantity(self) -> int:
        return self._local_quantity

    @property
    def max_selectable(self) -> int:
        return effective_max(self._stable.max_stock, self.global_cap)

    def displayed_line(self) -> LineItem:
        """The baseline line with the (possibly optimistic) local quantity."""
        if self._local_quantity == self._stable.quantity:
            return self._stable
        return self._stable.model_copy(update={"quantity": self._local_quantity})

    def _set_state(self, new_state: LineState) -> None:
        old_state = self._state
        self._state = new_state
        if self._on_transition is not None:
            self._on_transition(self, old_state, new_state)

    def sync(self, line: LineItem, seq: Optional[int] = None) -> bool:
        """
        Adopt a server-confirmed line from a cart reload.

        Ignored while a request is pending; that request's own reply decides.
        Also ignored when `seq` is older than the request that confirmed the
        current baseline.

        Returns:
            True if the baseline was replaced
        """
        if self._state != LineState.STABLE:
            return False
        if seq is not None:
            if seq < self._stable_seq:
                logger.debug("Ignoring line %s from request %s, baseline is from %s",
                             self.item_id, seq, self._stable_seq)
                return False
            self._stable_seq = seq
        self._stable = line
        self._local_quantity = line.quantity
        return True

    async def request_quantity(self, quantity: int) -> MutationOutcome:
        """
        Optimistically set the quantity and persist it remotely.

        Checked against the baseline's bounds first; a violation is rejected
        without a network call and without changing state.
        """
        violation = validate_quantity(quantity, self._stable.max_stock, self.global_cap)
        if violation is not None:
            return MutationOutcome(
                status=OutcomeStatus.REJECTED,
                quantity=self._local_quantity,
                reason=violation.message,
                violation=violation,
            )

        self._token += 1
        token = self._token
        seq = self._next_seq() if self._next_seq is not None else self._stable_seq
        self._local_quantity = quantity
        self._set_state(LineState.PENDING)
        logger.debug("Line %s pending: %s -> %s (token %s)",
                     self.item_id, self._stable.quantity, quantity, token)

        try:
            payload = await self._send(self.item_id, quantity)
            lines, _ = parse_cart(payload)
        except Exception as e:
            return self._fail(token, e)

        if token != self._token:
            logger.debug("Discarding stale reply for line %s (token %s, latest %s)",
                         self.item_id, token, self._token)
            return MutationOutcome(status=OutcomeStatus.STALE, quantity=self._local_quantity)

        confirmed = next((line for line in lines if line.id == self.item_id), None)
        if confirmed is not None:
            # Server value wins, even if it clamped the request
            self._stable = confirmed
            self._stable_seq = max(self._stable_seq, seq)
            self._local_quantity = confirmed.quantity
        else:
            self._local_quantity = self._stable.quantity
        self._set_state(LineState.STABLE)
        return MutationOutcome(
            status=OutcomeStatus.ACCEPTED,
            quantity=self._local_quantity,
            payload=payload,
            seq=seq,
        )

    def _fail(self, token: int, error: Exception) -> MutationOutcome:
        reason, error_type, max_quantity = failure_details(error)
        if not isinstance(error, UpstreamError):
            logger.exception("Unexpected error updating line %s", self.item_id)

        if token != self._token:
            logger.debug("Ignoring stale failure for line %s (token %s)", self.item_id, token)
            return MutationOutcome(
                status=OutcomeStatus.STALE,
                quantity=self._local_quantity,
                reason=reason,
                error_type=error_type,
                needs_resync=True,
            )

        logger.warning("Rolling back line %s to %s: %s", self.item_id, self._stable.quantity, error)
        self._local_quantity = self._stable.quantity
        self._set_state(LineState.ROLLED_BACK)
        self._set_state(LineState.STABLE)
        return MutationOutcome(
            status=OutcomeStatus.ROLLED_BACK,
            quantity=self._local_quantity,
            reason=reason,
            error_type=error_type,
            max_quantity=max_quantity,
            needs_resync=True,
        )
