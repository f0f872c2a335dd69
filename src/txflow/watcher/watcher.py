import logging
import math
from collections import defaultdict
from contextlib import contextmanager
from typing import (Any, Awaitable, Callable, Dict, Iterator, List, Optional,
                    Sequence)

from anyio import (TASK_STATUS_IGNORED, BrokenResourceError, CancelScope,
                   ClosedResourceError, Event, create_memory_object_stream,
                   create_task_group, fail_after, move_on_after, sleep)
from anyio.abc import TaskStatus
from anyio.streams.memory import (MemoryObjectReceiveStream,
                                  MemoryObjectSendStream)
from tenacity import (AsyncRetrying, before_sleep_log, retry_if_exception_type,
                      stop_after_attempt, wait_fixed)

from txflow.errors import ConfirmationError, ConfirmationTimeout
from txflow.ledger import Ledger, LedgerError
from txflow.models import (CommitmentLevel, ConfirmationEvent, OperationType,
                           PendingConfirmation, SignatureStatus)

from .confirmation_cache import ConfirmationCache

ConfirmationReaction = Callable[[PendingConfirmation], Awaitable[None]]

_logger = logging.getLogger(__name__)


def wrap_reaction(reaction: ConfirmationReaction) -> ConfirmationReaction:
    async def inner(confirmation: PendingConfirmation):
        try:
            return await reaction(confirmation)
        except Exception as e:
            _logger.exception(e)
            _logger.error(
                f"Reaction for confirmation {confirmation.signature} failed."
            )

    return inner


def _is_reached(status: SignatureStatus, finality: CommitmentLevel) -> bool:
    if status.confirmation_status is None:
        return False
    return status.confirmation_status.satisfies(finality)


# Tracks submitted signatures until they reach the requested commitment
# Every watched signature is polled in its own task
class ConfirmationWatcher(object):
    def __init__(
        self,
        ledger: Ledger,
        cache: ConfirmationCache,
        poll_interval: float = 1,
        timeout: float = 30,
        poll_retries: int = 3,
    ) -> None:
        self._ledger = ledger
        self._cache = cache
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._poll_retries = poll_retries

        self._tracked: Dict[str, PendingConfirmation] = {}
        self._done: Dict[str, Event] = {}
        self._watch_reactions: Dict[str, List[ConfirmationReaction]] = {}

        self._next_reaction_id = 0
        self._reactions: Dict[OperationType, Dict[int, ConfirmationReaction]] = (
            defaultdict(dict)
        )
        self._reaction_types: Dict[int, OperationType] = {}

        self._subscribers: List[MemoryObjectSendStream[ConfirmationEvent]] = []

        self._sender: Optional[MemoryObjectSendStream[PendingConfirmation]] = None
        self._cancel_scope: Optional[CancelScope] = None

    @property
    def running(self) -> bool:
        return self._sender is not None

    @property
    def tracked(self) -> List[PendingConfirmation]:
        return list(self._tracked.values())

    def add_reaction(
        self, operation_type: OperationType, reaction: ConfirmationReaction
    ) -> int:
        reaction_id = self._next_reaction_id
        self._next_reaction_id += 1
        self._reactions[operation_type][reaction_id] = reaction
        self._reaction_types[reaction_id] = operation_type
        _logger.debug(
            f"Add confirmation reaction {reaction_id} for {operation_type.name}"
        )
        return reaction_id

    def remove_reaction(self, reaction_id: int):
        if reaction_id in self._reaction_types:
            operation_type = self._reaction_types.pop(reaction_id)
            self._reactions[operation_type].pop(reaction_id)
            _logger.debug(
                f"Remove confirmation reaction {reaction_id} of {operation_type.name}"
            )

    @contextmanager
    def subscribe(self) -> Iterator[MemoryObjectReceiveStream[ConfirmationEvent]]:
        sender, receiver = create_memory_object_stream[ConfirmationEvent](math.inf)
        self._subscribers.append(sender)
        try:
            with receiver:
                yield receiver
        finally:
            if sender in self._subscribers:
                self._subscribers.remove(sender)
            sender.close()

    def _broadcast(self, event: ConfirmationEvent):
        for sender in list(self._subscribers):
            try:
                sender.send_nowait(event)
            except (BrokenResourceError, ClosedResourceError):
                self._subscribers.remove(sender)

    async def watch(
        self,
        signature: str,
        operation_type: OperationType,
        finality: CommitmentLevel = CommitmentLevel.Confirmed,
        extras: Optional[Any] = None,
        reactions: Optional[Sequence[ConfirmationReaction]] = None,
    ) -> PendingConfirmation:
        if signature in self._tracked:
            _logger.debug(f"Signature {signature} is already being watched")
            return self._tracked[signature]

        resolved = await self._cache.get(signature)
        if resolved is not None:
            _logger.debug(f"Signature {signature} is already {resolved.status}")
            return resolved

        if self._sender is None:
            raise ConfirmationError("The confirmation watcher is not running")

        confirmation = PendingConfirmation(
            signature=signature,
            operation_type=operation_type,
            finality=finality,
            extras=extras,
        )
        self._tracked[signature] = confirmation
        self._done[signature] = Event()
        if reactions:
            self._watch_reactions[signature] = list(reactions)

        try:
            await self._sender.send(confirmation)
        except (BrokenResourceError, ClosedResourceError) as e:
            self._tracked.pop(signature, None)
            self._done.pop(signature, None)
            self._watch_reactions.pop(signature, None)
            raise ConfirmationError(
                f"Cannot watch signature {signature}: watcher stopped"
            ) from e

        _logger.info(
            f"Watch signature {signature} of {operation_type.name} until {finality.value}"
        )
        return confirmation

    async def wait(
        self, signature: str, timeout: Optional[float] = None
    ) -> PendingConfirmation:
        if signature in self._done:
            confirmation = self._tracked[signature]
            with fail_after(timeout):
                await self._done[signature].wait()
            return confirmation

        confirmation = await self._cache.get(signature)
        if confirmation is None:
            raise KeyError(f"Signature {signature} is not watched")
        return confirmation

    async def history(self) -> List[PendingConfirmation]:
        return await self._cache.load_all()

    async def clear_history(self):
        # tracked signatures are kept, they land in the history once resolved
        await self._cache.clear()
        _logger.info("Confirmation history cleared")

    async def _get_status(self, signature: str) -> Optional[SignatureStatus]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._poll_retries),
            wait=wait_fixed(self._poll_interval),
            retry=retry_if_exception_type(LedgerError),
            before_sleep=before_sleep_log(_logger, logging.DEBUG),
            reraise=True,
        ):
            with attempt:
                return await self._ledger.get_signature_status(signature)
        return None

    async def _poll(self, confirmation: PendingConfirmation):
        signature = confirmation.signature
        with move_on_after(self._timeout) as scope:
            while True:
                try:
                    status = await self._get_status(signature)
                except LedgerError as e:
                    _logger.error(
                        f"Cannot get status of {signature}, keep polling: {e}"
                    )
                    status = None

                if status is not None:
                    if status.err is not None:
                        err = ConfirmationError(
                            f"Transaction {signature} failed: {status.err}"
                        )
                        confirmation.resolve("error", str(err))
                        return
                    if _is_reached(status, confirmation.finality):
                        confirmation.resolve("fetched")
                        return

                await sleep(self._poll_interval)

        if scope.cancelled_caught:
            err = ConfirmationTimeout(
                f"Transaction {signature} has not reached "
                f"{confirmation.finality.value} after {self._timeout}s"
            )
            confirmation.resolve("error", str(err))

    async def _track(self, confirmation: PendingConfirmation):
        signature = confirmation.signature
        try:
            try:
                await self._poll(confirmation)
            except Exception as e:
                _logger.exception(e)
                err = ConfirmationError(
                    f"Cannot get status of {signature}: {type(e).__name__}: {e}"
                )
                confirmation.resolve("error", str(err))

            if confirmation.status == "fetched":
                _logger.info(f"Signature {signature} reached {confirmation.finality.value}")
            else:
                _logger.warning(f"Signature {signature} confirmation error: {confirmation.error}")

            try:
                with fail_after(5, shield=True):
                    await self._cache.save(confirmation)
            except Exception as e:
                _logger.exception(e)
                _logger.error(f"Cannot save confirmation of {signature}")

            reactions = list(self._reactions[confirmation.operation_type].values())
            reactions.extend(self._watch_reactions.pop(signature, []))
            async with create_task_group() as tg:
                for reaction in reactions:
                    tg.start_soon(wrap_reaction(reaction), confirmation)

            event_type = (
                "TxConfirmSuccess" if confirmation.status == "fetched" else "TxConfirmTimeout"
            )
            self._broadcast(
                ConfirmationEvent(type=event_type, confirmation=confirmation)
            )
        finally:
            self._tracked.pop(signature, None)
            done = self._done.pop(signature, None)
            if done is not None:
                done.set()

    async def _dispatcher(
        self, receiver: MemoryObjectReceiveStream[PendingConfirmation]
    ):
        async with receiver:
            async with create_task_group() as tg:
                async for confirmation in receiver:
                    tg.start_soon(self._track, confirmation)

    # Start the watcher
    # Signatures passed to watch are tracked until stop is called
    async def start(self, *, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        assert (
            self._cancel_scope is None
        ), "The watcher has already started. You should stop the watcher before restart it."

        try:
            self._cancel_scope = CancelScope()

            with self._cancel_scope:
                sender, receiver = create_memory_object_stream[PendingConfirmation](40)
                self._sender = sender

                async with create_task_group() as tg:
                    tg.start_soon(self._dispatcher, receiver)
                    task_status.started()

        finally:
            if self._sender is not None:
                self._sender.close()
            self._sender = None
            self._cancel_scope = None

    # Stop the watcher
    # Signatures still being tracked are dropped
    async def stop(self):
        if self._cancel_scope is not None and not self._cancel_scope.cancel_called:
            self._cancel_scope.cancel()
        for sender in self._subscribers:
            sender.close()
        self._subscribers.clear()
