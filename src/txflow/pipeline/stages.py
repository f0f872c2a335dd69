from typing import Dict, FrozenSet, List, NamedTuple, Optional

from txflow.models import Stage


class StageRule(NamedTuple):
    success: Optional[Stage]
    failures: FrozenSet[Stage]
    # whether the cancellation flag is checked before leaving the stage
    check_cancel: bool


_terminal = StageRule(success=None, failures=frozenset(), check_cancel=False)


STAGE_RULES: Dict[Stage, StageRule] = {
    Stage.Idle: StageRule(
        success=Stage.TransactionStart,
        failures=frozenset(),
        check_cancel=False,
    ),
    Stage.TransactionStart: StageRule(
        success=Stage.InitTransaction,
        failures=frozenset(),
        check_cancel=True,
    ),
    Stage.InitTransaction: StageRule(
        success=Stage.SignTransaction,
        failures=frozenset(
            [
                Stage.TransactionStartFailure,
                Stage.InitTransactionFailure,
                Stage.WalletNotFound,
            ]
        ),
        check_cancel=True,
    ),
    Stage.SignTransaction: StageRule(
        success=Stage.SendTransaction,
        failures=frozenset([Stage.SignTransactionFailure, Stage.WalletNotFound]),
        check_cancel=True,
    ),
    Stage.SendTransaction: StageRule(
        success=Stage.ConfirmTransaction,
        failures=frozenset([Stage.SendTransactionFailure]),
        check_cancel=True,
    ),
    Stage.ConfirmTransaction: StageRule(
        success=Stage.TransactionFinished,
        failures=frozenset([Stage.ConfirmTransactionFailure]),
        check_cancel=True,
    ),
    Stage.TransactionFinished: _terminal,
    Stage.TransactionStartFailure: _terminal,
    Stage.InitTransactionFailure: _terminal,
    Stage.SignTransactionFailure: _terminal,
    Stage.SendTransactionFailure: _terminal,
    Stage.ConfirmTransactionFailure: _terminal,
    Stage.WalletNotFound: _terminal,
}


def next_stages(stage: Stage) -> List[Stage]:
    rule = STAGE_RULES[stage]
    res = sorted(rule.failures, key=lambda s: s.value)
    if rule.success is not None:
        res.insert(0, rule.success)
    return res


def is_valid_transition(src: Stage, dst: Stage) -> bool:
    rule = STAGE_RULES[src]
    return dst == rule.success or dst in rule.failures


def is_valid_path(path: List[Stage]) -> bool:
    if len(path) == 0 or path[0] != Stage.Idle:
        return False
    return all(is_valid_transition(src, dst) for src, dst in zip(path, path[1:]))
