import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from txflow.builders import BuilderRegistry
from txflow.errors import BuildFailure
from txflow.models import (OperationType, TxContext, UnsignedTransaction,
                           get_operation_name, is_wrappable)

_logger = logging.getLogger(__name__)


class Route(Enum):
    Direct = "direct"
    Proposal = "proposal"


def route(operation_type: OperationType, context: TxContext) -> Route:
    if context.is_multisig and is_wrappable(operation_type):
        return Route.Proposal
    return Route.Direct


class DispatchRouter(object):
    def __init__(
        self, registry: BuilderRegistry, proposal_expiry_seconds: int = 604800
    ) -> None:
        self.registry = registry
        self.proposal_expiry_seconds = proposal_expiry_seconds

    def route(self, operation_type: OperationType, context: TxContext) -> Route:
        return route(operation_type, context)

    async def build(
        self,
        operation_type: OperationType,
        params: Dict[str, Any],
        context: TxContext,
    ) -> Optional[UnsignedTransaction]:
        builder = self.registry.get(operation_type)
        if builder is None:
            raise BuildFailure(
                f"No instruction builder for {get_operation_name(operation_type)}"
            )

        r = self.route(operation_type, context)
        if r == Route.Proposal:
            if not context.multisig_id:
                raise BuildFailure("Multisig account is not set")
            if not context.proposal_title:
                raise BuildFailure("Proposal title is required")
            if self.registry.proposal_builder is None:
                raise BuildFailure("No proposal builder")

        tx = await builder.build(params, context)
        if tx is None or r == Route.Direct:
            return tx

        if len(tx.instructions) != 1:
            raise BuildFailure(
                f"Cannot wrap {len(tx.instructions)} instructions into one proposal"
            )
        instruction = tx.instructions[0]
        expiry = datetime.now() + timedelta(seconds=self.proposal_expiry_seconds)
        _logger.debug(
            f"wrap {get_operation_name(operation_type)} into a proposal of "
            f"{context.multisig_id}, expires at {expiry}"
        )
        return await self.registry.proposal_builder.build_proposal(  # type: ignore
            instruction, expiry, operation_type, context
        )
