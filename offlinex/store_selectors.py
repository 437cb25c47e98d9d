import time
from typing import Callable, Any, Optional, overload
from .types import (
    Input, Output, R, StateSelector, ResultSelector, MemoizedSelector
)

@overload
def create_selector(selector: StateSelector[Input, Output], *, deep: bool = False, ttl: Optional[float] = None, maxsize: int = 128) -> StateSelector[Input, Output]:
    ...

@overload
def create_selector(*selectors: StateSelector[Input, Any], result_fn: ResultSelector[R], deep: bool = False, ttl: Optional[float] = None, maxsize: int = 128) -> StateSelector[Input, R]:
    ...

def create_selector(*selectors: Callable[[Any], Any], result_fn: Optional[Callable[..., Any]] = None, deep: bool = False, ttl: Optional[float] = None, maxsize: int = 128) -> MemoizedSelector:
    """
    創建一個複合選擇器，支援記憶化、深淺比較與TTL控制

    Args:
        *selectors: 多個輸入選擇器，這些函數會從 state 中提取對應的值
        result_fn: 處理輸出結果的函數，將多個選擇器的輸出進行處理
        deep: 是否進行深度比較（預設為 False）
        ttl: 快取有效時間（秒），若超過此時間則重新計算，預設為無限
        maxsize: 緩存的最大條目數，預設為128

    Returns:
        經過快取優化的 selector 函數
    """
    if not result_fn and len(selectors) == 1:
        return selectors[0]

    if not result_fn:
        result_fn = lambda *args: args

    cache = []

    def selector(state: Any) -> Any:
        nonlocal cache

        inputs = tuple(select(state) for select in selectors)
        now = time.time()

        if ttl is not None:
            cache = [item for item in cache if now - item[0] <= ttl]

        for _, cached_inputs, cached_result in cache:
            if deep:
                matched = inputs == cached_inputs
            else:
                # 淺比較：輸入必須是同一個物件
                matched = all(a is b for a, b in zip(inputs, cached_inputs))
            if matched:
                return cached_result

        result = result_fn(*inputs)
        while len(cache) >= maxsize:
            cache.pop(0)
        cache.append((now, inputs, result))
        return result

    def cache_info():
        return (0, 0, maxsize, len(cache))

    def cache_clear():
        cache.clear()

    selector.cache_info = cache_info  # type: ignore
    selector.cache_clear = cache_clear  # type: ignore

    return selector
