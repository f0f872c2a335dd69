from .abc import InstructionBuilder, ProposalBuilder
from .mock_impl import MockInstructionBuilder, MockProposalBuilder
from .registry import BuilderRegistry

__all__ = [
    "InstructionBuilder",
    "ProposalBuilder",
    "BuilderRegistry",
    "MockInstructionBuilder",
    "MockProposalBuilder",
]
