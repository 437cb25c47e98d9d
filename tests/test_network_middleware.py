"""Tests for NetworkMiddleware: the offline interception pipeline.

Covers:
- Pass-through of non-matching actions regardless of connectivity
- Deferral while offline (actions and thunks)
- Dequeue-then-forward when a queued entry is replayed online
- Dismissal of queued entries by later actions
- Configuration errors raised at dispatch time
"""
import logging
import re

import pytest

from conftest import queued
from offlinex import (
    Action,
    ConfigurationError,
    NetworkConfig,
    NetworkMiddleware,
    QueuedAction,
    Thunk,
    create_action,
    create_reducer,
    create_store,
    offline_target,
    select_action_queue,
)
from offlinex.network import (
    DISMISS_ACTIONS_FROM_QUEUE,
    FETCH_OFFLINE_MODE,
    REMOVE_FROM_ACTION_QUEUE,
)


def fetch_action(action_type, *dismiss):
    meta = {"retry": True, "dismiss": list(dismiss)} if dismiss else None
    return Action(action_type, {"is_fetching": True}, meta)


class TestActionTypesConfig:
    """NetworkMiddleware(action_types=["REFRESH_DATA"])."""

    @pytest.fixture
    def middleware(self):
        return NetworkMiddleware(action_types=["REFRESH_DATA"])

    def test_non_matching_action_passes_through_offline(self, make_store, recorder, middleware):
        store = make_store(is_connected=False, middleware=middleware)
        action = Action("TEST")

        store.dispatch(action)

        assert recorder.actions == [action]
        assert recorder.actions[0] is action
        assert queued(store) == []

    def test_matching_action_online_passes_through(self, make_store, recorder, middleware):
        store = make_store(is_connected=True, middleware=middleware)
        action = fetch_action("REFRESH_DATA")

        store.dispatch(action)

        assert recorder.actions == [action]
        assert queued(store) == []

    def test_matching_action_offline_is_deferred(self, make_store, recorder, middleware):
        store = make_store(is_connected=False, middleware=middleware)
        action = fetch_action("REFRESH_DATA")

        store.dispatch(action)

        assert recorder.types == [FETCH_OFFLINE_MODE]
        assert offline_target(recorder.actions[0]) is action
        assert queued(store) == [action]
        assert queued(store)[0] is action

    def test_type_outside_list_is_not_matched_by_default_regex(self, make_store, recorder, middleware):
        store = make_store(is_connected=False, middleware=middleware)
        action = fetch_action("FETCH_SOME_DATA_REQUEST")

        store.dispatch(action)

        assert recorder.actions == [action]


class TestDefaultConfig:

    def test_request_action_offline_is_deferred(self, make_store, recorder):
        store = make_store(is_connected=False)
        action = fetch_action("FETCH_SOME_DATA_REQUEST")

        store.dispatch(action)

        assert recorder.types == [FETCH_OFFLINE_MODE]
        assert queued(store) == [action]

    def test_refresh_action_does_not_match_offline(self, make_store, recorder):
        store = make_store(is_connected=False)
        action = fetch_action("REFRESH_DATA")

        store.dispatch(action)

        assert recorder.actions == [action]
        assert queued(store) == []

    def test_entries_are_appended_in_dispatch_order(self, make_store):
        store = make_store(is_connected=False)
        first = fetch_action("FETCH_USERS_REQUEST")
        second = fetch_action("FETCH_ORDERS_REQUEST")

        store.dispatch(first)
        store.dispatch(second)

        assert queued(store) == [first, second]

    def test_same_object_is_queued_once(self, make_store, recorder):
        store = make_store(is_connected=False)
        first = fetch_action("FETCH_USERS_REQUEST")
        second = fetch_action("FETCH_ORDERS_REQUEST")

        store.dispatch(first)
        store.dispatch(second)
        store.dispatch(first)

        assert recorder.types == [FETCH_OFFLINE_MODE] * 3
        assert queued(store) == [second, first]

    def test_equal_but_distinct_objects_are_both_queued(self, make_store):
        store = make_store(is_connected=False)
        first = fetch_action("FETCH_USERS_REQUEST")
        twin = fetch_action("FETCH_USERS_REQUEST")

        store.dispatch(first)
        store.dispatch(twin)

        assert len(queued(store)) == 2

    def test_action_creators_build_distinct_objects(self, make_store):
        fetch_users = create_action("FETCH_USERS_REQUEST")
        store = make_store(is_connected=False)

        store.dispatch(fetch_users())
        store.dispatch(fetch_users())

        assert len(queued(store)) == 2


class TestRegexActionTypeConfig:

    @pytest.fixture
    def middleware(self):
        return NetworkMiddleware(regex_action_type=re.compile("REFRESH"))

    def test_refresh_matches_offline(self, make_store, recorder, middleware):
        store = make_store(is_connected=False, middleware=middleware)
        action = fetch_action("REFRESH_DATA")

        store.dispatch(action)

        assert recorder.types == [FETCH_OFFLINE_MODE]
        assert offline_target(recorder.actions[0]) is action

    def test_fetch_no_longer_matches(self, make_store, recorder, middleware):
        store = make_store(is_connected=False, middleware=middleware)
        action = fetch_action("FETCH_DATA")

        store.dispatch(action)

        assert recorder.actions == [action]


class TestReplayWhileConnected:

    def test_queued_action_is_dequeued_then_forwarded(self, make_store, recorder):
        action = fetch_action("FETCH_SOME_DATA_REQUEST")
        store = make_store(is_connected=True, action_queue=[action])
        entry = select_action_queue(store.state)[0]

        store.dispatch(action)

        assert recorder.types == [REMOVE_FROM_ACTION_QUEUE, "FETCH_SOME_DATA_REQUEST"]
        assert recorder.actions[0].payload["entry_id"] == entry.entry_id
        assert recorder.actions[0].payload["action"] is action
        assert recorder.actions[1] is action
        assert queued(store) == []

    def test_equal_copy_dequeues_the_queued_entry(self, make_store, recorder):
        queued_copy = fetch_action("FETCH_SOME_DATA_REQUEST")
        action = fetch_action("FETCH_SOME_DATA_REQUEST")
        store = make_store(is_connected=True, action_queue=[queued_copy])
        entry = select_action_queue(store.state)[0]

        store.dispatch(action)

        assert recorder.types == [REMOVE_FROM_ACTION_QUEUE, "FETCH_SOME_DATA_REQUEST"]
        assert recorder.actions[0].payload["entry_id"] == entry.entry_id
        assert recorder.actions[1] is action
        assert queued(store) == []

    def test_identity_wins_over_an_earlier_equal_entry(self, make_store):
        older = fetch_action("FETCH_SOME_DATA_REQUEST")
        action = fetch_action("FETCH_SOME_DATA_REQUEST")
        store = make_store(is_connected=True, action_queue=[older, action])

        store.dispatch(action)

        assert len(queued(store)) == 1
        assert queued(store)[0] is older

    def test_only_the_replayed_entry_is_removed(self, make_store):
        first = fetch_action("FETCH_USERS_REQUEST")
        second = fetch_action("FETCH_ORDERS_REQUEST")
        store = make_store(is_connected=True, action_queue=[first, second])

        store.dispatch(second)

        assert queued(store) == [first]

    def test_queued_entry_that_no_longer_matches_is_forwarded_untouched(self, make_store, recorder):
        action = fetch_action("REFRESH_DATA")
        store = make_store(is_connected=True, action_queue=[action])

        store.dispatch(action)

        assert recorder.actions == [action]
        assert queued(store) == [action]


def another_thunk(dispatch, get_state):
    return dispatch(Action("TOGGLE_DROPDOWN"))


def fetch_thunk(dispatch, get_state):
    dispatch(Action("FETCH_DATA_REQUEST"))
    dispatch(Action("FETCH_DATA_SUCCESS"))
    return "done"


class TestThunks:

    def test_thunk_not_matching_runs_offline(self, make_store, recorder):
        store = make_store(is_connected=False)

        store.dispatch(another_thunk)

        assert recorder.types == ["TOGGLE_DROPDOWN"]

    def test_matching_thunk_offline_is_deferred(self, make_store, recorder):
        store = make_store(is_connected=False)

        store.dispatch(fetch_thunk)

        assert recorder.types == [FETCH_OFFLINE_MODE]
        assert recorder.actions[0].payload["prev_thunk"] is fetch_thunk
        assert queued(store) == [fetch_thunk]

    def test_queued_thunk_replayed_online(self, make_store, recorder):
        thunk = Thunk(fetch_thunk, retry=True)
        store = make_store(is_connected=True, action_queue=[thunk])

        result = store.dispatch(thunk)

        assert result == "done"
        assert recorder.types == [
            REMOVE_FROM_ACTION_QUEUE,
            "FETCH_DATA_REQUEST",
            "FETCH_DATA_SUCCESS",
        ]
        assert recorder.actions[0].payload["action"] is thunk
        assert queued(store) == []

    def test_regex_function_name(self, make_store, recorder):
        middleware = NetworkMiddleware(regex_function_name=re.compile("^another"))
        store = make_store(is_connected=False, middleware=middleware)

        store.dispatch(another_thunk)
        store.dispatch(fetch_thunk)

        assert recorder.types == [FETCH_OFFLINE_MODE, "FETCH_DATA_REQUEST", "FETCH_DATA_SUCCESS"]
        assert queued(store) == [another_thunk]


class TestDismiss:

    def test_no_entry_declares_dismiss(self, make_store, recorder):
        action = fetch_action("FETCH_DATA_REQUEST")
        store = make_store(is_connected=False, action_queue=[action])

        store.dispatch(Action("NAVIGATE_BACK"))

        assert recorder.actions == [Action("NAVIGATE_BACK")]
        assert queued(store) == [action]

    def test_matching_dismiss_removes_entry_before_forwarding(self, make_store, recorder):
        action = fetch_action("FETCH_DATA_REQUEST", "NAVIGATE_BACK")
        store = make_store(is_connected=False, action_queue=[action])
        entry = select_action_queue(store.state)[0]
        navigation = Action("NAVIGATE_BACK")

        store.dispatch(navigation)

        assert recorder.types == [DISMISS_ACTIONS_FROM_QUEUE, "NAVIGATE_BACK"]
        assert recorder.actions[0].payload["action_type"] == "NAVIGATE_BACK"
        assert recorder.actions[0].payload["entry_id"] == entry.entry_id
        assert recorder.actions[1] is navigation
        assert queued(store) == []

    def test_dismiss_list_without_match(self, make_store, recorder):
        action = fetch_action("FETCH_DATA_REQUEST", "NAVIGATE_BACK")
        store = make_store(is_connected=False, action_queue=[action])

        store.dispatch(Action("NAVIGATE_TO_LOGIN"))

        assert recorder.types == ["NAVIGATE_TO_LOGIN"]
        assert queued(store) == [action]

    def test_one_directive_per_entry_in_queue_order(self, make_store, recorder):
        users = fetch_action("FETCH_USERS_REQUEST", "LOGOUT")
        keep = fetch_action("FETCH_SETTINGS_REQUEST", "NAVIGATE_BACK")
        orders = Thunk(fetch_thunk, dismiss=["LOGOUT"])
        store = make_store(is_connected=True, action_queue=[users, keep, orders])
        ids = [e.entry_id for e in select_action_queue(store.state)]

        store.dispatch(Action("LOGOUT"))

        assert recorder.types == [DISMISS_ACTIONS_FROM_QUEUE, DISMISS_ACTIONS_FROM_QUEUE, "LOGOUT"]
        assert [a.payload["entry_id"] for a in recorder.actions[:2]] == [ids[0], ids[2]]
        assert queued(store) == [keep]

    def test_dismiss_precedes_deferral_of_incoming_action(self, make_store, recorder):
        stale = fetch_action("FETCH_PAGE_REQUEST", "FETCH_OTHER_PAGE_REQUEST")
        store = make_store(is_connected=False, action_queue=[stale])
        incoming = fetch_action("FETCH_OTHER_PAGE_REQUEST")

        store.dispatch(incoming)

        assert recorder.types == [DISMISS_ACTIONS_FROM_QUEUE, FETCH_OFFLINE_MODE]
        assert queued(store) == [incoming]

    def test_thunks_dismiss_nothing(self, make_store, recorder):
        action = fetch_action("FETCH_DATA_REQUEST", "another_thunk")
        store = make_store(is_connected=False, action_queue=[action])

        store.dispatch(another_thunk)

        assert recorder.types == ["TOGGLE_DROPDOWN"]
        assert queued(store) == [action]


class TestConfigurationErrors:

    @pytest.mark.parametrize("config, message", [
        (NetworkConfig(action_types="REFRESH"), "You should pass an array as actionTypes param"),
        (NetworkConfig(regex_action_type="REFRESH"), "You should pass a regex as regexActionType param"),
        (NetworkConfig(regex_function_name="REFRESH"), "You should pass a regex as regexFunctionName param"),
    ])
    def test_wrong_shape_raises_at_dispatch(self, make_store, recorder, config, message):
        store = make_store(is_connected=False, middleware=NetworkMiddleware(config=config))

        with pytest.raises(ConfigurationError, match=message):
            store.dispatch(fetch_action("REFRESH_DATA"))

        assert recorder.actions == []
        assert queued(store) == []

    def test_error_aborts_before_any_dismissal(self, make_store, recorder):
        action = fetch_action("FETCH_DATA_REQUEST", "NAVIGATE_BACK")
        middleware = NetworkMiddleware(action_types="NAVIGATE_BACK")
        store = make_store(is_connected=False, action_queue=[action], middleware=middleware)

        with pytest.raises(ConfigurationError):
            store.dispatch(Action("NAVIGATE_BACK"))

        assert recorder.actions == []
        assert queued(store) == [action]

    def test_fixing_config_recovers_on_next_dispatch(self, make_store, recorder):
        middleware = NetworkMiddleware(action_types="REFRESH_DATA")
        store = make_store(is_connected=False, middleware=middleware)
        action = fetch_action("REFRESH_DATA")

        with pytest.raises(ConfigurationError):
            store.dispatch(action)
        middleware.config.action_types = ["REFRESH_DATA"]
        store.dispatch(action)

        assert recorder.types == [FETCH_OFFLINE_MODE]
        assert queued(store) == [action]

    def test_error_carries_config_key(self, make_store):
        store = make_store(middleware=NetworkMiddleware(regex_action_type="REFRESH"))

        with pytest.raises(ConfigurationError) as exc_info:
            store.dispatch(Action("ANY"))

        assert exc_info.value.config_key == "regex_action_type"
        assert exc_info.value.component == "NetworkMiddleware"

    def test_missing_network_slice(self):
        store = create_store()
        store.register_root({"other": create_reducer({})})
        store.apply_middleware(NetworkMiddleware())

        with pytest.raises(ConfigurationError, match="No network state registered"):
            store.dispatch(Action("ANY"))


def test_custom_feature_key(recorder):
    from offlinex import create_network_reducer, ThunkMiddleware

    store = create_store()
    store.register_root({"connectivity": create_network_reducer({"is_connected": False})})
    store.apply_middleware(NetworkMiddleware(feature_key="connectivity"), ThunkMiddleware, recorder)
    action = fetch_action("FETCH_DATA_REQUEST")

    store.dispatch(action)

    assert recorder.types == [FETCH_OFFLINE_MODE]
    assert store.state["connectivity"]["action_queue"][0].action is action


def test_deferral_is_logged(make_store, caplog):
    store = make_store(is_connected=False)
    caplog.set_level(logging.INFO, logger="offlinex.middleware")

    store.dispatch(fetch_action("FETCH_DATA_REQUEST"))

    assert "offline: deferring FETCH_DATA_REQUEST" in caplog.text


def test_queued_action_entries_are_records(make_store):
    action = fetch_action("FETCH_DATA_REQUEST")
    store = make_store(is_connected=False)

    store.dispatch(action)

    entry = select_action_queue(store.state)[0]
    assert isinstance(entry, QueuedAction)
    assert entry.action is action
    assert entry.entry_id
