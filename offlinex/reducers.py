"""
Reducer 工具：以 action type 分派處理函式，並把各特性切片組合成 root state。
"""
from typing import Any, Callable, Dict, Optional, TypeVar

from .actions import Action

S = TypeVar("S")
Reducer = Callable[[S, Action], S]


def on(action_creator_or_type: Any, handler: Callable[[Any, Action], Any]) -> Dict[str, Callable]:
    """
    把 action 生成器 (取其 .type) 或 type 字串對應到處理函式。

    Returns:
        {action_type: handler}
    """
    action_type = getattr(action_creator_or_type, "type", None)
    if not callable(action_creator_or_type) or action_type is None:
        action_type = str(action_creator_or_type)
    return {action_type: handler}


def create_reducer(initial_state: S, *handlers: Any) -> Reducer[S]:
    """
    建立 reducer，未註冊的 action type 原樣返回 state。

    Args:
        initial_state: 切片的初始狀態，會掛在返回函式的 initial_state 屬性上
        *handlers: on(...) 的結果，或 (action_type, handler) 元組
    """
    table: Dict[str, Callable] = {}
    for handler in handlers:
        if isinstance(handler, tuple):
            table[handler[0]] = handler[1]
        else:
            table.update(handler)

    def reducer(state: S = initial_state, action: Optional[Action] = None) -> S:
        handle = table.get(action.type) if action is not None else None
        return handle(state, action) if handle else state

    reducer.initial_state = initial_state
    reducer.handlers = table
    return reducer


class ReducerManager:
    """保存各特性切片的 reducer，並計算新的 root state。"""

    def __init__(self) -> None:
        self._reducers: Dict[str, Reducer] = {}
        self._state: Dict[str, Any] = {}

    def add_reducer(self, feature_key: str, reducer: Reducer) -> None:
        self._reducers[feature_key] = reducer
        self._state[feature_key] = reducer.initial_state

    def add_reducers(self, reducers: Dict[str, Reducer]) -> None:
        for feature_key, reducer in reducers.items():
            self.add_reducer(feature_key, reducer)

    def remove_reducer(self, feature_key: str) -> None:
        self._reducers.pop(feature_key, None)
        self._state.pop(feature_key, None)

    def reduce(self, state: Optional[Dict[str, Any]] = None, action: Optional[Action] = None) -> Dict[str, Any]:
        """
        讓每個已註冊的 reducer 處理 action；已卸載的切片不會留在結果中。
        state 為 None 時以管理器目前保存的狀態為起點。
        """
        base = self._state if state is None else state
        self._state = {
            key: reducer(base.get(key, reducer.initial_state), action)
            for key, reducer in self._reducers.items()
        }
        return self._state
