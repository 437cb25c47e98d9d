"""
Thunk 定義與 action / thunk 的統一描述。

離線中介軟體要同時處理兩種可 dispatch 的東西：
- 純資料的 Action，以 type 辨識
- 延遲執行的 thunk，以函數名稱辨識

describe() 在管線入口做一次能力檢查，把兩者轉成相同形狀的 OfflineUnit。
"""
from enum import Enum
from typing import Any, Callable, Iterable, NamedTuple, Optional, Tuple

from .actions import Action
from .types import DispatchFunction, GetState


class Thunk:
    """
    帶有名稱與離線選項的 thunk。

    Attributes:
        fn: 實際執行的函數，簽名為 fn(dispatch, get_state)
        name: 用於 regex_function_name 比對的名稱
        retry: 是否標記為可重試
        dismiss: 會讓此 thunk 自佇列移除的 action type 列表
    """
    __slots__ = ("fn", "name", "retry", "dismiss", "__weakref__")

    def __init__(
        self,
        fn: Callable[[DispatchFunction, GetState], Any],
        name: Optional[str] = None,
        retry: bool = False,
        dismiss: Iterable[str] = (),
    ) -> None:
        self.fn = fn
        self.name = name or getattr(fn, "__name__", type(fn).__name__)
        self.retry = retry
        self.dismiss = tuple(dismiss)

    def __call__(self, dispatch: DispatchFunction, get_state: GetState) -> Any:
        return self.fn(dispatch, get_state)

    def __repr__(self) -> str:
        return f"Thunk(name='{self.name}', retry={self.retry}, dismiss={self.dismiss!r})"


def create_thunk(fn=None, *, name: Optional[str] = None, retry: bool = False, dismiss: Iterable[str] = ()):
    """
    把函數包裝成 Thunk 的裝飾器。

    用法：
      @create_thunk
      def fetch_user(dispatch, get_state): ...
    或
      @create_thunk(retry=True, dismiss=["NAVIGATE_BACK"])
      def fetch_orders(dispatch, get_state): ...
    """
    if fn is None:
        def decorator(func):
            return create_thunk(func, name=name, retry=retry, dismiss=dismiss)
        return decorator

    return Thunk(fn, name=name, retry=retry, dismiss=dismiss)


class UnitKind(Enum):
    ACTION = "action"
    THUNK = "thunk"


class OfflineUnit(NamedTuple):
    """Action 或 thunk 的統一視圖。"""

    kind: UnitKind
    type: Optional[str]
    name: Optional[str]
    retry: bool
    dismiss: Tuple[str, ...]
    target: Any


def is_thunk(action: Any) -> bool:
    """可調用且不是 Action 的東西一律視為 thunk。"""
    return callable(action) and not isinstance(action, Action)


def describe(action: Any) -> OfflineUnit:
    """
    把 dispatch 進來的 action 或 thunk 轉成 OfflineUnit。

    Args:
        action: Action 物件、Thunk，或帶有 retry / dismiss 屬性的普通函數

    Returns:
        OfflineUnit，thunk 沒有 type，action 沒有 name
    """
    if is_thunk(action):
        name = getattr(action, "name", None) or getattr(action, "__name__", None)
        return OfflineUnit(
            kind=UnitKind.THUNK,
            type=None,
            name=name,
            retry=bool(getattr(action, "retry", False)),
            dismiss=tuple(getattr(action, "dismiss", None) or ()),
            target=action,
        )

    meta = getattr(action, "meta", None) or {}
    return OfflineUnit(
        kind=UnitKind.ACTION,
        type=getattr(action, "type", None),
        name=None,
        retry=bool(meta.get("retry", False)),
        dismiss=tuple(meta.get("dismiss", None) or ()),
        target=action,
    )
