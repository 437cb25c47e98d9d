"""
恢復連線時重播離線佇列。

ReplayTrigger 觀察 Store 中的連線狀態，每次從離線轉為連線時，
依入列順序把佇列中的每個項目重新 dispatch 一次。重新 dispatch 的項目
會經過 NetworkMiddleware，由它發出移除指令後再放行；放行後仍留在佇列中的項目由這裡移除。
"""
import logging
from typing import Any, Optional, Tuple

from reactivex.abc import DisposableBase

from .network import (
    NETWORK_FEATURE_KEY, QueuedAction, create_network_selectors, remove_action_from_queue,
)
from .store import Store

logger = logging.getLogger(__name__)


class ReplayTrigger:
    """
    連線恢復時重播離線佇列。

    範例:
        ```python
        trigger = ReplayTrigger(store).start()
        store.dispatch(connection_change(False))
        store.dispatch(fetch_data_request())   # 入列
        store.dispatch(connection_change(True))  # 自動重播並清空佇列
        ```
    """

    def __init__(self, store: Store, feature_key: str = NETWORK_FEATURE_KEY) -> None:
        """
        Args:
            store: 已註冊網路狀態切片與 NetworkMiddleware 的 Store
            feature_key: 網路狀態切片的名稱
        """
        self.store = store
        self.feature_key = feature_key
        self._selectors = create_network_selectors(feature_key)
        self._subscription: Optional[DisposableBase] = None

    def start(self) -> "ReplayTrigger":
        """開始觀察連線狀態，重複調用不會重複訂閱。"""
        if self._subscription is None:
            self._subscription = self.store.select(self._selectors.select_is_connected).subscribe(
                on_next=self._on_connectivity,
                on_error=lambda err: logger.error("連線狀態流錯誤: %s", err),
            )
        return self

    def _on_connectivity(self, change: Tuple[Any, Any]) -> None:
        was_connected, is_connected = change
        if was_connected is not False or is_connected is not True:
            return
        try:
            self.replay()
        except Exception:
            # 不讓異常中斷 Store 的狀態流
            logger.exception("重播離線佇列失敗")

    def _still_queued(self, entry: QueuedAction) -> bool:
        queue = self._selectors.select_action_queue(self.store.state)
        return any(e.entry_id == entry.entry_id for e in queue)

    def replay(self) -> int:
        """
        依入列順序重新 dispatch 佇列快照中的每個項目。

        重播途中被其他項目 dismiss 掉的項目會略過；dispatch 之後仍留在
        佇列中的項目 (例如已不符合比對規則) 由這裡發出移除指令，
        每個項目最多離開佇列一次。

        Returns:
            重新 dispatch 的項目數
        """
        queue = tuple(self._selectors.select_action_queue(self.store.state))
        if queue:
            logger.info("back online: replaying %d queued action(s)", len(queue))
        replayed = 0
        for entry in queue:
            if not self._still_queued(entry):
                logger.debug("skipping %s, no longer queued", entry.entry_id)
                continue
            self.store.dispatch(entry.action)
            replayed += 1
            if self._still_queued(entry):
                self.store.dispatch(remove_action_from_queue(entry))
        return replayed

    def dispose(self) -> None:
        """停止觀察連線狀態。"""
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None

    def teardown(self) -> None:
        self.dispose()
