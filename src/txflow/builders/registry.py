from typing import Dict, List, Optional

from txflow.models import OperationType

from .abc import InstructionBuilder, ProposalBuilder


class BuilderRegistry(object):
    def __init__(self, proposal_builder: Optional[ProposalBuilder] = None) -> None:
        self._builders: Dict[OperationType, InstructionBuilder] = {}
        self.proposal_builder = proposal_builder

    def register(self, operation_type: OperationType, builder: InstructionBuilder):
        self._builders[operation_type] = builder

    def unregister(self, operation_type: OperationType):
        self._builders.pop(operation_type, None)

    def get(self, operation_type: OperationType) -> Optional[InstructionBuilder]:
        return self._builders.get(operation_type)

    def operation_types(self) -> List[OperationType]:
        return list(self._builders.keys())
