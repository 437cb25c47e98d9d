"""
OfflineX：帶離線佇列的 Redux 風格狀態管理。

斷線時把符合規則的 action / thunk 存入佇列，恢復連線後依序重播，
並允許後續的 action 作廢佇列中過期的項目。
"""
import logging

from .errors import OfflineXError, ConfigurationError
from .actions import Action, create_action, init_store, update_reducer
from .thunks import Thunk, create_thunk, describe, is_thunk, OfflineUnit, UnitKind
from .matchers import (
    NetworkConfig, MatchMode, MatchRule, ValidationResult,
    validate_config, matches,
    DEFAULT_ACTION_TYPE_REGEX, DEFAULT_FUNCTION_NAME_REGEX,
)
from .network import (
    NETWORK_FEATURE_KEY, QueuedAction, NetworkStatus, find_entry,
    connection_change, fetch_offline_mode, remove_action_from_queue, dismiss_action_from_queue,
    offline_target, create_network_reducer, network_reducer,
    create_network_selectors, select_network_state, select_is_connected, select_action_queue,
    get_network_status,
)
from .dismiss import resolve_dismissals
from .middleware import (
    BaseMiddleware, LoggerMiddleware, ThunkMiddleware,
    NetworkMiddleware, create_network_middleware,
)
from .replay import ReplayTrigger
from .reducers import create_reducer, on, ReducerManager
from .store import Store, create_store
from .store_selectors import create_selector
from .immutable_utils import to_immutable, to_dict, to_pydantic

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Errors
    "OfflineXError", "ConfigurationError",

    # Actions & thunks
    "Action", "create_action", "init_store", "update_reducer",
    "Thunk", "create_thunk", "describe", "is_thunk", "OfflineUnit", "UnitKind",

    # Matching
    "NetworkConfig", "MatchMode", "MatchRule", "ValidationResult",
    "validate_config", "matches",
    "DEFAULT_ACTION_TYPE_REGEX", "DEFAULT_FUNCTION_NAME_REGEX",

    # Network state
    "NETWORK_FEATURE_KEY", "QueuedAction", "NetworkStatus", "find_entry",
    "connection_change", "fetch_offline_mode", "remove_action_from_queue",
    "dismiss_action_from_queue", "offline_target",
    "create_network_reducer", "network_reducer",
    "create_network_selectors", "select_network_state", "select_is_connected",
    "select_action_queue", "get_network_status",
    "resolve_dismissals",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "ThunkMiddleware",
    "NetworkMiddleware", "create_network_middleware",
    "ReplayTrigger",

    # Store
    "create_reducer", "on", "ReducerManager",
    "Store", "create_store",
    "create_selector",

    # Immutable Utils
    "to_immutable", "to_dict", "to_pydantic",
]
