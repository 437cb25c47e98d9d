"""
OfflineX 範例：斷線時暫存請求，恢復連線後自動重播
"""

from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
import logging

from immutables import Map

from offlinex import (
    NETWORK_FEATURE_KEY,
    LoggerMiddleware,
    NetworkMiddleware,
    ReplayTrigger,
    ThunkMiddleware,
    connection_change,
    create_action,
    create_reducer,
    create_selector,
    create_store,
    create_thunk,
    network_reducer,
    on,
    select_action_queue,
)


# ====== 1. 定義 Actions ======
fetch_todos_request = create_action(
    "FETCH_TODOS_REQUEST",
    meta={"retry": True, "dismiss": ["NAVIGATE_BACK"]},
)
fetch_todos_success = create_action("FETCH_TODOS_SUCCESS", lambda todos: todos)
navigate_back = create_action("NAVIGATE_BACK")


# ====== 2. 定義 Reducer ======
todo_reducer = create_reducer(
    Map({"todos": (), "loading": False}),
    on(fetch_todos_request, lambda state, action: state.set("loading", True)),
    on(fetch_todos_success, lambda state, action: state.set("todos", tuple(action.payload)).set("loading", False)),
)


# ====== 3. 定義 Thunk ======
@create_thunk(retry=True)
def fetch_profile(dispatch, get_state):
    # 實際應用中這裡會呼叫 API
    dispatch(fetch_todos_success(["buy milk", "write report"]))


# ====== 4. 建立 Store ======
store = create_store({"todo": todo_reducer, NETWORK_FEATURE_KEY: network_reducer})
store.apply_middleware(
    LoggerMiddleware(),
    NetworkMiddleware(),
    ThunkMiddleware,
)
trigger = ReplayTrigger(store).start()

get_queue_size = create_selector(select_action_queue, result_fn=len)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    store.select(get_queue_size).subscribe(
        on_next=lambda t: print(f"佇列長度: {t[0]} -> {t[1]}")
    )

    print("\n==== 斷線 ====")
    store.dispatch(connection_change(False))
    store.dispatch(fetch_todos_request())
    store.dispatch(fetch_profile)

    print("\n==== 離開頁面，作廢 FETCH_TODOS_REQUEST ====")
    store.dispatch(navigate_back())

    print("\n==== 恢復連線，重播剩下的項目 ====")
    store.dispatch(connection_change(True))

    print("\n==== 最終狀態 ====")
    print(store.state["todo"])
    print(store.state[NETWORK_FEATURE_KEY])
