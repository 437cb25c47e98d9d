"""
OfflineX 的 Store。

Store 保存 root state，讓每個 dispatch 先經過中介軟體鏈，再交給 reducers，
並以 reactivex 的 Subject 對外發出 (舊狀態, 新狀態)。
"""
import inspect
from typing import Any, Callable, Dict, Generic, List, TypeVar

from reactivex import Observable, Subject, operators as ops

from .actions import init_store, update_reducer
from .reducers import Reducer, ReducerManager

S = TypeVar("S")

_HOOKS = ("on_next", "on_complete", "on_error")


def _has_hooks(mw: Any) -> bool:
    return all(callable(getattr(mw, name, None)) for name in _HOOKS)


class Store(Generic[S]):
    """
    狀態容器。

    中介軟體有兩種形態，可同時具備：
    - 可調用的工廠：mw(store)(next_dispatch) 返回新的 dispatch
    - 實作 on_next / on_complete / on_error 鉤子的物件，由 Store 包裹在其外層
    """

    def __init__(self) -> None:
        self._reducers = ReducerManager()
        self._state: Dict[str, Any] = {}
        self._actions = Subject()
        self._states = Subject()
        self._middleware: List[Any] = []
        self._actions.subscribe(on_next=self._reduce)
        self.dispatch = self._build_dispatch()

    def _reduce(self, action: Any) -> None:
        previous = self._state
        self._state = self._reducers.reduce(previous, action)
        self._states.on_next((previous, self._state))

    def _dispatch_to_reducers(self, action: Any) -> Any:
        self._actions.on_next(action)
        return action

    def _build_dispatch(self) -> Callable[[Any], Any]:
        dispatch = self._dispatch_to_reducers
        for mw in reversed(self._middleware):
            if callable(mw):
                dispatch = mw(self)(dispatch)
            if _has_hooks(mw):
                dispatch = self._with_hooks(mw, dispatch)
        return dispatch

    def _with_hooks(self, mw: Any, next_dispatch: Callable[[Any], Any]) -> Callable[[Any], Any]:
        """以 mw 的鉤子包住 next_dispatch，異常在通知 on_error 後照常拋出。"""
        def dispatch(action: Any) -> Any:
            mw.on_next(action, self._state)
            try:
                result = next_dispatch(action)
            except Exception as err:
                mw.on_error(err, action)
                raise
            mw.on_complete(self._state, action)
            return result

        return dispatch

    def apply_middleware(self, *middlewares: Any) -> None:
        """
        依序加入中介軟體並重建 dispatch 鏈，排在前面的先看到 action。

        Args:
            *middlewares: 中介軟體類別 (會被實例化) 或實例
        """
        for mw in middlewares:
            self._middleware.append(mw() if inspect.isclass(mw) else mw)
        self.dispatch = self._build_dispatch()

    def select(self, selector: Callable[[S], Any]) -> Observable:
        """
        觀察 state 的一部分。

        Returns:
            發出 (舊值, 新值) 的 Observable，新值不變時不發出
        """
        return self._states.pipe(
            ops.map(lambda change: (selector(change[0]), selector(change[1]))),
            ops.distinct_until_changed(lambda pair: pair[1]),
        )

    @property
    def state(self) -> S:
        return self._state

    def register_root(self, root_reducers: Dict[str, Reducer]) -> "Store[S]":
        """註冊根級 reducers 並以初始狀態重建 root state。"""
        self._reducers.add_reducers(root_reducers)
        self._state = self._reducers.reduce(None, init_store())
        return self

    def register_feature(self, feature_key: str, reducer: Reducer) -> "Store[S]":
        self._reducers.add_reducer(feature_key, reducer)
        self._state = self._reducers.reduce(self._state, update_reducer())
        return self

    def unregister_feature(self, feature_key: str) -> "Store[S]":
        self._reducers.remove_reducer(feature_key)
        self._state = self._reducers.reduce(self._state, update_reducer())
        return self

    def teardown(self) -> None:
        """通知各中介軟體清理資源，並結束動作流與狀態流。"""
        for mw in self._middleware:
            if hasattr(mw, "teardown"):
                mw.teardown()
        self._actions.on_completed()
        self._states.on_completed()

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


def create_store(root_reducers: Dict[str, Reducer] = None) -> Store:
    """
    建立 Store，可選擇同時註冊根級 reducers。

    Args:
        root_reducers: 特性鍵名到 reducer 的映射

    Returns:
        新的 Store 實例
    """
    store: Store = Store()
    if root_reducers:
        store.register_root(root_reducers)
    return store
