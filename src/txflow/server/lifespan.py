import logging
from contextlib import asynccontextmanager

from anyio import create_task_group
from fastapi import FastAPI

from txflow.service import TxService

_logger = logging.getLogger(__name__)


class Lifespan(object):
    def __init__(self, service: TxService) -> None:
        self.service = service

    @asynccontextmanager
    async def run(self, app: FastAPI):
        async with create_task_group() as tg:
            await tg.start(self.service.start)
            try:
                yield
            finally:
                _logger.info("Stopping transaction service")
                await self.service.stop()
                tg.cancel_scope.cancel()
