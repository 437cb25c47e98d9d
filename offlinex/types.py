"""
OfflineX 共用的類型定義。

集中放置 dispatch 鏈、中介軟體與 Action 生成器的類型別名與協議，
讓其他模組只需從這裡導入。
"""
from typing import Any, Callable, Generic, TypeVar

from typing_extensions import Protocol


S = TypeVar("S")
P = TypeVar("P")
Input = TypeVar("Input")
Output = TypeVar("Output")
R = TypeVar("R")

# ———— Dispatch 相關 ————
GetState = Callable[[], Any]
DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[[Any], Any]
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]
ThunkFunction = Callable[[DispatchFunction, GetState], Any]

# ———— Selector 相關 ————
StateSelector = Callable[[Input], Output]
ResultSelector = Callable[..., R]
MemoizedSelector = Callable[[Any], Any]


class ActionCreator(Protocol, Generic[P]):
    """Action 生成器：可調用並帶有 type 屬性。"""

    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...


ActionCreatorWithoutPayload = ActionCreator[None]
ActionCreatorWithPayload = ActionCreator


class Store(Protocol, Generic[S]):
    """中介軟體看到的 Store 介面。"""

    dispatch: DispatchFunction

    @property
    def state(self) -> S: ...


class Middleware(Protocol):
    """物件型中介軟體的鉤子協議。"""

    def on_next(self, action: Any, prev_state: Any) -> None: ...

    def on_complete(self, next_state: Any, action: Any) -> None: ...

    def on_error(self, error: Exception, action: Any) -> None: ...
