"""
基於 OfflineX 的中介軟體定義模組。

此模組提供在動作分發過程中插入自定義邏輯的中介軟體：
- NetworkMiddleware：依連線狀態決定 action 直接放行、延後入列，或清除過期的佇列項目
- ThunkMiddleware：執行 dispatch 進來的 thunk
- LoggerMiddleware：以 logging 記錄每次 dispatch 前後的狀態
"""
import logging
import re
from typing import Any, Optional, Sequence, Union, cast

from .actions import Action
from .dismiss import resolve_dismissals
from .matchers import NetworkConfig, validate_config
from .network import (
    NETWORK_FEATURE_KEY,
    dismiss_action_from_queue,
    fetch_offline_mode,
    find_entry,
    get_network_status,
    remove_action_from_queue,
)
from .thunks import describe, is_thunk
from .types import (
    DispatchFunction, MiddlewareFunction, NextDispatch, Store, ThunkFunction,
    Middleware as MiddlewareProtocol
)

logger = logging.getLogger(__name__)


def _label(action: Any) -> str:
    unit = describe(action)
    if unit.type is not None:
        return unit.type
    return f"thunk {unit.name}"


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    """

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action 或 thunk
            prev_state: dispatch 之前的 store.state
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 reducer 處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新 store.state
            action: 剛剛 dispatch 的 Action 或 thunk
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action 或 thunk
        """
        pass

    def teardown(self) -> None:
        """
        當 Store 清理資源時調用，用於清理中間件持有的資源。
        """
        pass


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware, MiddlewareProtocol):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察離線佇列與連線狀態的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        """
        Args:
            logger: 使用的 logger，預設為本模組的 logger
            level: 記錄等級
        """
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_next(self, action: Any, prev_state: Any) -> None:
        self.logger.log(self.level, "dispatching %s", _label(action))
        self.logger.log(self.level, "state before %s: %s", _label(action), prev_state)

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "state after %s: %s", _label(action), next_state)

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("error in %s: %s", _label(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware(BaseMiddleware, MiddlewareProtocol):
    """
    支援 dispatch 函數 (thunk)，可以在 thunk 內執行非同步邏輯或多次 dispatch。

    放在 NetworkMiddleware 之後，離線時 thunk 會先被攔截入列，
    恢復連線重播時才會真正執行。

    範例:
        ```python
        @create_thunk(retry=True)
        def fetch_user(dispatch, get_state):
            dispatch(fetch_user_request())
            dispatch(fetch_user_success(api.fetch_user()))

        store.dispatch(fetch_user)
        ```
    """

    def __call__(self, store: Store[Any]) -> MiddlewareFunction:
        """
        配置 Thunk 中介軟體。

        Args:
            store: Store 實例

        Returns:
            配置函數，接收 next_dispatch 並返回新的 dispatch 函數
        """
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Union[ThunkFunction, Action]) -> Any:
                if is_thunk(action):
                    return cast(ThunkFunction, action)(store.dispatch, lambda: store.state)
                return next_dispatch(action)
            return dispatch
        return middleware


# ———— NetworkMiddleware ————
class NetworkMiddleware(BaseMiddleware, MiddlewareProtocol):
    """
    離線攔截中介，依連線狀態與比對規則處理每一個 dispatch。

    每次 dispatch 的流程：
    1. 驗證設定，錯誤時直接拋出 ConfigurationError，不放行也不發出任何指令
    2. 對佇列中宣告 dismiss 此 action type 的項目，依佇列順序發出 dismiss 指令
    3. 不符合比對規則：原樣放行
    4. 已連線且 action 本身就在佇列中 (重播)：先發出移除指令，再放行
    5. 已連線且不在佇列中：原樣放行
    6. 離線：改為放行 fetch_offline_mode(action)，由 reducer 入列

    指令透過 next_dispatch 送出，不會再經過本中介。

    使用場景:
    - 行動裝置或邊緣設備斷線時暫存請求，恢復連線後依序重送。
    - 使用者離開頁面後，丟棄該頁面排隊中的請求。
    """

    def __init__(
        self,
        action_types: Optional[Sequence[str]] = None,
        regex_action_type: Optional["re.Pattern[str]"] = None,
        regex_function_name: Optional["re.Pattern[str]"] = None,
        *,
        config: Optional[NetworkConfig] = None,
        feature_key: str = NETWORK_FEATURE_KEY,
    ) -> None:
        """
        初始化 NetworkMiddleware。設定在 dispatch 時才驗證。

        Args:
            action_types: 需要離線處理的 action type 列表
            regex_action_type: 比對 action type 的 regex
            regex_function_name: 比對 thunk 名稱的 regex
            config: 直接傳入 NetworkConfig，與上面三個參數擇一使用
            feature_key: 網路狀態切片在 root state 中的名稱
        """
        self.config = config or NetworkConfig(
            action_types=action_types,
            regex_action_type=regex_action_type,
            regex_function_name=regex_function_name,
        )
        self.feature_key = feature_key

    def __call__(self, store: Store[Any]) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                return self.intercept(action, store, next_dispatch)
            return dispatch
        return middleware

    def intercept(self, action: Any, store: Store[Any], next_dispatch: NextDispatch) -> Any:
        """
        處理單次 dispatch。

        Args:
            action: 正在 dispatch 的 Action 或 thunk
            store: Store 實例，用於讀取連線狀態與佇列
            next_dispatch: dispatch 鏈的下一層

        Returns:
            next_dispatch 對最終放行對象的返回值

        Raises:
            ConfigurationError: 設定形狀錯誤，或 Store 中沒有網路狀態切片
        """
        result = validate_config(self.config)
        if result.error is not None:
            raise result.error

        status = get_network_status(store.state, self.feature_key)

        dismissed = resolve_dismissals(action, status.action_queue)
        for entry in dismissed:
            logger.debug("dismissing queued %s (%s) on %s", _label(entry.action), entry.entry_id, _label(action))
            next_dispatch(dismiss_action_from_queue(describe(action).type, entry))
        if dismissed:
            status = get_network_status(store.state, self.feature_key)

        if not result.rule.test(describe(action)):
            return next_dispatch(action)

        if status.is_connected:
            entry = find_entry(status.action_queue, action)
            if entry is not None:
                logger.debug("dequeuing %s (%s) for replay", _label(action), entry.entry_id)
                next_dispatch(remove_action_from_queue(entry))
            return next_dispatch(action)

        logger.info("offline: deferring %s", _label(action))
        return next_dispatch(fetch_offline_mode(action))


def create_network_middleware(
    action_types: Optional[Sequence[str]] = None,
    regex_action_type: Optional["re.Pattern[str]"] = None,
    regex_function_name: Optional["re.Pattern[str]"] = None,
    feature_key: str = NETWORK_FEATURE_KEY,
) -> NetworkMiddleware:
    """
    創建一個 NetworkMiddleware。

    範例:
        >>> store.apply_middleware(
        ...     create_network_middleware(action_types=["REFRESH_DATA"]),
        ...     ThunkMiddleware,
        ... )
    """
    return NetworkMiddleware(
        action_types=action_types,
        regex_action_type=regex_action_type,
        regex_function_name=regex_function_name,
        feature_key=feature_key,
    )
