import logging
import math
from contextlib import contextmanager
from typing import Iterator, List

from anyio import BrokenResourceError, ClosedResourceError, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from txflow.models import TransactionStatusInfo

_logger = logging.getLogger(__name__)


class StatusChannel(object):
    """
    Broadcasts every status change of the pipeline to its subscribers.

    Subscriber buffers are unbounded so that a slow observer still receives
    every intermediate stage. A new subscriber first receives the latest status.
    """

    def __init__(self) -> None:
        self._latest = TransactionStatusInfo()
        self._senders: List[MemoryObjectSendStream[TransactionStatusInfo]] = []
        self._closed = False

    @property
    def latest(self) -> TransactionStatusInfo:
        return self._latest.model_copy(deep=True)

    @contextmanager
    def subscribe(self) -> Iterator[MemoryObjectReceiveStream[TransactionStatusInfo]]:
        sender, receiver = create_memory_object_stream[TransactionStatusInfo](math.inf)
        sender.send_nowait(self.latest)
        if self._closed:
            sender.close()
        else:
            self._senders.append(sender)
        try:
            with receiver:
                yield receiver
        finally:
            if sender in self._senders:
                self._senders.remove(sender)
            sender.close()

    def publish(self, status: TransactionStatusInfo):
        self._latest = status.model_copy(deep=True)
        for sender in list(self._senders):
            try:
                sender.send_nowait(status.model_copy(deep=True))
            except (BrokenResourceError, ClosedResourceError):
                _logger.debug("status subscriber is gone")
                self._senders.remove(sender)

    def close(self):
        self._closed = True
        for sender in self._senders:
            sender.close()
        self._senders.clear()
