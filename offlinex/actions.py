"""
基於 OfflineX 的 Action 定義模組。

此模組提供 Action 類別以及創建 Action 的功能。
Actions 是描述狀態變更意圖的不可變對象；meta 欄位用於攜帶離線處理的
附加資訊，例如 retry 與 dismiss。
"""
from typing import Callable, Optional, Dict, Any, Union, overload

from immutables import Map

from .immutable_utils import to_immutable
from .types import P, ActionCreator, ActionCreatorWithoutPayload, ActionCreatorWithPayload


class Action:
    """
    表示一個有類型、可選負載與可選 meta 的動作。

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
        meta: 附加資訊（可選），例如 {"retry": True, "dismiss": ("NAVIGATE_BACK",)}

    注意:
        __eq__ 為結構比較；離線佇列先以物件身份 (is) 尋找項目，找不到時才用 __eq__。
    """
    __slots__ = ('type', 'payload', 'meta')

    def __init__(self, type: str, payload: Optional[Any] = None, meta: Optional[Any] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', _process_payload(payload))
        super().__setattr__('meta', to_immutable(meta) if meta is not None else None)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return (
            self.type == other.type
            and self.payload == other.payload
            and self.meta == other.meta
        )

    def __hash__(self):
        return hash((self.type, self.payload, self.meta))

    def __repr__(self):
        if self.meta is None:
            return f"Action(type='{self.type}', payload={repr(self.payload)})"
        return f"Action(type='{self.type}', payload={repr(self.payload)}, meta={repr(self.meta)})"


def _process_payload(payload: Any) -> Any:
    """
    處理 payload，將字典轉換為不可變結構。

    Args:
        payload: 原始 payload

    Returns:
        處理後的 payload
    """
    if isinstance(payload, dict):
        return Map(payload)
    return payload


@overload
def create_action(action_type: str, *, meta: Optional[Dict[str, Any]] = None) -> ActionCreatorWithoutPayload:
    ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P], *, meta: Optional[Dict[str, Any]] = None) -> ActionCreatorWithPayload[P]:
    ...


def create_action(
    action_type: str,
    prepare_fn: Optional[Callable[..., Any]] = None,
    *,
    meta: Optional[Dict[str, Any]] = None
) -> ActionCreator[Any]:
    """
    創建一個 Action 生成器函數。

    每次調用生成器都會得到一個新的 Action 物件，離線佇列依靠這一點
    以物件身份辨識「被重播的那一個」。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數
        meta: 可選的 meta，會附加到每個生成的 Action 上

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> fetch_user = create_action("FETCH_USER_REQUEST", lambda user_id: user_id,
        ...                            meta={"retry": True, "dismiss": ["NAVIGATE_BACK"]})
        >>> fetch_user(7)
        Action(type='FETCH_USER_REQUEST', payload=7, meta=...)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action:
        if prepare_fn:
            payload = prepare_fn(*args, **kwargs)
        elif len(args) == 1 and not kwargs:
            payload = args[0]
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
        else:
            payload = None
        return Action(action_type, payload, meta)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore

    return action_creator


# 根 Actions
init_store: ActionCreatorWithoutPayload = create_action("[Root] Init Store")
update_reducer: ActionCreatorWithoutPayload = create_action("[Root] Update Reducer")
