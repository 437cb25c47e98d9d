"""
網路狀態切片：連線狀態、離線佇列，以及操作它們的 action 與 reducer。

狀態形狀：

    state["network"] = Map(is_connected=bool, action_queue=(QueuedAction, ...))

佇列中的每個項目在入列時取得一個 entry_id；移除與 dismiss 都以 entry_id
指定目標，而「正在被重播的是哪個項目」則以 action 的物件身份判斷。
"""
import uuid
from typing import Any, Dict, Iterable, NamedTuple, Optional, Tuple

from immutables import Map
from pydantic import BaseModel, ConfigDict

from .actions import Action, create_action
from .errors import ConfigurationError
from .immutable_utils import to_pydantic
from .reducers import create_reducer, on
from .store_selectors import create_selector
from .thunks import is_thunk

NETWORK_FEATURE_KEY = "network"


class QueuedAction:
    """
    離線佇列中的一個項目。

    比較一律使用物件身份，兩個內容相同的項目不視為重複。
    """
    __slots__ = ("entry_id", "action")

    def __init__(self, entry_id: str, action: Any) -> None:
        self.entry_id = entry_id
        self.action = action

    @classmethod
    def create(cls, action: Any) -> "QueuedAction":
        return cls(new_entry_id(), action)

    def __repr__(self) -> str:
        return f"QueuedAction(entry_id='{self.entry_id}', action={self.action!r})"


def new_entry_id() -> str:
    return uuid.uuid4().hex


def find_entry(queue: Iterable[QueuedAction], action: Any) -> Optional[QueuedAction]:
    """
    在佇列中尋找 action：先以物件身份比對，找不到時再以相等比對。

    相等比對讓重新建立、內容相同的 Action 也能認出佇列中的舊副本；
    thunk 沒有定義相等，等同於身份比對。

    Args:
        queue: 佇列快照
        action: 要尋找的 Action 或 thunk

    Returns:
        找到的第一個 QueuedAction，否則 None
    """
    entries = tuple(queue)
    for entry in entries:
        if entry.action is action:
            return entry
    for entry in entries:
        if entry.action == action:
            return entry
    return None


# ———— Actions ————
CONNECTION_CHANGE = "[Network] Connection Change"
FETCH_OFFLINE_MODE = "[Network] Fetch Offline Mode"
REMOVE_FROM_ACTION_QUEUE = "[Network] Remove From Action Queue"
DISMISS_ACTIONS_FROM_QUEUE = "[Network] Dismiss Actions From Queue"


def _offline_payload(action: Any, entry_id: Optional[str] = None) -> Dict[str, Any]:
    key = "prev_thunk" if is_thunk(action) else "prev_action"
    return {key: action, "entry_id": entry_id or new_entry_id()}


connection_change = create_action(CONNECTION_CHANGE, lambda is_connected: bool(is_connected))
fetch_offline_mode = create_action(FETCH_OFFLINE_MODE, _offline_payload)
remove_action_from_queue = create_action(
    REMOVE_FROM_ACTION_QUEUE,
    lambda entry: {"entry_id": entry.entry_id, "action": entry.action},
)
dismiss_action_from_queue = create_action(
    DISMISS_ACTIONS_FROM_QUEUE,
    lambda action_type, entry: {"action_type": action_type, "entry_id": entry.entry_id},
)


def offline_target(action: Action) -> Any:
    """取出 fetch_offline_mode 所包裝的原始 action 或 thunk。"""
    payload = action.payload
    return payload["prev_thunk"] if "prev_thunk" in payload else payload["prev_action"]


# ———— Reducer ————
def _handle_connection_change(state: Map, action: Action) -> Map:
    return state.set("is_connected", action.payload)


def _handle_offline_mode(state: Map, action: Action) -> Map:
    target = offline_target(action)
    # 同一個物件只保留一份，重新入列時移到隊尾
    queue = tuple(e for e in state["action_queue"] if e.action is not target)
    entry = QueuedAction(action.payload["entry_id"], target)
    return state.set("action_queue", queue + (entry,))


def _without_entry(state: Map, entry_id: str) -> Map:
    queue = state["action_queue"]
    remaining = tuple(e for e in queue if e.entry_id != entry_id)
    if len(remaining) == len(queue):
        return state
    return state.set("action_queue", remaining)


def _handle_remove(state: Map, action: Action) -> Map:
    return _without_entry(state, action.payload["entry_id"])


def _handle_dismiss(state: Map, action: Action) -> Map:
    return _without_entry(state, action.payload["entry_id"])


def create_network_reducer(initial_state: Optional[Dict[str, Any]] = None):
    """
    創建網路狀態的 reducer。

    Args:
        initial_state: 可選的初始值，例如 {"is_connected": False, "action_queue": [action]}；
            action_queue 中的原始 action 會自動包成 QueuedAction

    Returns:
        可註冊到 Store 的 reducer
    """
    values = {"is_connected": True, "action_queue": ()}
    if initial_state:
        values.update(initial_state)
    queue = tuple(
        item if isinstance(item, QueuedAction) else QueuedAction.create(item)
        for item in values["action_queue"]
    )
    state = Map({"is_connected": bool(values["is_connected"]), "action_queue": queue})

    return create_reducer(
        state,
        on(connection_change, _handle_connection_change),
        on(fetch_offline_mode, _handle_offline_mode),
        on(remove_action_from_queue, _handle_remove),
        on(dismiss_action_from_queue, _handle_dismiss),
    )


network_reducer = create_network_reducer()


# ———— Selectors ————
class NetworkSelectors(NamedTuple):
    select_network_state: Any
    select_is_connected: Any
    select_action_queue: Any


def create_network_selectors(feature_key: str = NETWORK_FEATURE_KEY) -> NetworkSelectors:
    """為指定的狀態切片名稱建立一組 selector。"""
    def select_network_state(state: Any) -> Optional[Map]:
        return state.get(feature_key) if state else None

    select_is_connected = create_selector(
        select_network_state,
        result_fn=lambda network: None if network is None else network["is_connected"],
    )
    select_action_queue = create_selector(
        select_network_state,
        result_fn=lambda network: () if network is None else network["action_queue"],
    )
    return NetworkSelectors(select_network_state, select_is_connected, select_action_queue)


select_network_state, select_is_connected, select_action_queue = create_network_selectors()


class NetworkStatus(BaseModel):
    """網路狀態切片的唯讀快照。"""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    is_connected: bool
    action_queue: Tuple[QueuedAction, ...] = ()


def get_network_status(state: Any, feature_key: str = NETWORK_FEATURE_KEY) -> NetworkStatus:
    """
    讀取目前的連線狀態與佇列。

    Args:
        state: Store 的 root state
        feature_key: 網路狀態切片的名稱

    Returns:
        NetworkStatus 快照

    Raises:
        ConfigurationError: Store 中沒有註冊網路狀態切片
    """
    network = state.get(feature_key) if state else None
    if network is None:
        raise ConfigurationError(
            f"No network state registered under '{feature_key}'",
            component="NetworkStore",
            config_key="feature_key",
        )
    return to_pydantic(network, NetworkStatus)
