"""找出被新 dispatch 的 action 作廢的佇列項目。"""
from typing import Any, Iterable, List

from .network import QueuedAction
from .thunks import describe


def resolve_dismissals(action: Any, queue: Iterable[QueuedAction]) -> List[QueuedAction]:
    """
    返回所有在 dismiss 列表中宣告了 action.type 的佇列項目，保持佇列順序。

    Thunk 沒有 type，因此不會作廢任何項目。與連線狀態及比對規則無關。

    Args:
        action: 正在 dispatch 的 Action 或 thunk
        queue: 佇列快照

    Returns:
        應被 dismiss 的 QueuedAction 列表
    """
    action_type = describe(action).type
    if action_type is None:
        return []
    return [
        entry for entry in queue
        if action_type in describe(entry.action).dismiss
    ]
