import logging
import os
import signal
from typing import Optional

import anyio
from anyio import TASK_STATUS_IGNORED, Event, create_task_group, move_on_after, sleep
from anyio.abc import TaskGroup, TaskStatus

from txflow import db, log, utils
from txflow.builders import BuilderRegistry
from txflow.config import Config, get_config
from txflow.fees import ConfigFeeQuoter
from txflow.ledger import WebLedger
from txflow.models import CommitmentLevel, OperationType
from txflow.pipeline import TransactionPipeline
from txflow.router import DispatchRouter
from txflow.server import Lifespan, Server
from txflow.service import TxService, set_service
from txflow.signer import LocalSigner, Signer
from txflow.watcher import ConfirmationWatcher, DbConfirmationCache

_logger = logging.getLogger(__name__)


def _disabled_operations(config: Config):
    res = []
    for name in config.disabled_operations:
        try:
            res.append(OperationType[name])
        except KeyError:
            _logger.warning(f"Unknown operation {name} in disabled_operations")
    return res


class TxFlowRunner(object):
    def __init__(self, registry: Optional[BuilderRegistry] = None) -> None:
        self.config = get_config()

        log.init(
            self.config.log.dir,
            self.config.log.level,
            self.config.log.filename,
        )
        _logger.debug("Logger init completed.")

        if registry is None:
            registry = BuilderRegistry()
        self.registry = registry

        self._server: Optional[Server] = None
        self._service: Optional[TxService] = None
        self._ledger: Optional[WebLedger] = None
        self._tg: Optional[TaskGroup] = None

        self._shutdown_event: Optional[Event] = None
        self._should_shutdown = False
        signal.signal(signal.SIGINT, self._shutdown_signal_handler)
        signal.signal(signal.SIGTERM, self._shutdown_signal_handler)

    def _shutdown_signal_handler(self, *args):
        self._should_shutdown = True

    async def _check_should_shutdown(self):
        while not self._should_shutdown:
            await sleep(0.1)
        self._set_shutdown_event()

    def _set_shutdown_event(self):
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def _wait_for_shutdown(self):
        if self._shutdown_event is not None:
            await self._shutdown_event.wait()
            await self._stop()

    def _build_service(self) -> TxService:
        config = self.config

        ledger = WebLedger(
            config.ledger.provider,
            timeout=config.ledger.timeout,
            commitment=CommitmentLevel(config.ledger.commitment),
        )
        self._ledger = ledger

        signer: Optional[Signer] = None
        if len(config.signer.privkey) > 0:
            signer = LocalSigner(config.signer.privkey)
            _logger.info(f"Signer {utils.shorten_address(signer.address)} loaded")
        else:
            _logger.warning("No private key found, transactions cannot be signed")

        cache = DbConfirmationCache(max_size=config.watcher.history_size)
        watcher = ConfirmationWatcher(
            ledger,
            cache,
            poll_interval=config.watcher.poll_interval,
            timeout=config.watcher.timeout,
        )

        router = DispatchRouter(
            self.registry,
            proposal_expiry_seconds=config.multisig.proposal_expiry_seconds,
        )
        pipeline = TransactionPipeline(
            router,
            ledger,
            watcher,
            signer=signer,
            disabled_operations=_disabled_operations(config),
        )

        fee_quoter = ConfigFeeQuoter(config.fees)

        service = TxService(pipeline, fee_quoter, ledger, watcher)
        set_service(service)
        return service

    async def run(self, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        assert self._tg is None, "txflow is running"

        _logger.info("Starting txflow")

        self._shutdown_event = Event()

        await db.init(self.config.db)
        _logger.info("DB init completed.")

        self._service = self._build_service()
        _logger.info("Transaction service created.")

        if not self.config.headless:
            if self.config.web_dist != "":
                _logger.info(f"Serving web UI from: {os.path.abspath(self.config.web_dist)}")
            self._server = Server(self.config.web_dist, lifespan=Lifespan(self._service))
            _logger.info("Web server init completed.")

        try:
            async with create_task_group() as tg:
                self._tg = tg

                tg.start_soon(self._check_should_shutdown)
                tg.start_soon(self._wait_for_shutdown)

                if self._server is not None:
                    await tg.start(
                        self._server.start,
                        self.config.server_host,
                        self.config.server_port,
                        self.config.log.level == "DEBUG",
                    )
                else:
                    await tg.start(self._service.start)
                _logger.info("txflow started.")
                task_status.started()
        finally:
            with move_on_after(2, shield=True):
                if self._ledger is not None:
                    await self._ledger.close()
                await db.close()
            self._shutdown_event = None
            self._tg = None
            _logger.info("txflow stopped")

    async def _stop(self):
        _logger.info("Stopping txflow")
        if self._tg is None:
            return

        if self._server is not None:
            self._server.stop()
        if self._service is not None:
            with move_on_after(10, shield=True):
                await self._service.stop()
        self._tg.cancel_scope.cancel()

    async def stop(self):
        self._set_shutdown_event()


def run():
    try:
        runner = TxFlowRunner()
        anyio.run(runner.run)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
