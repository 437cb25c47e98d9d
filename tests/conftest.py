"""Shared fixtures: a store wired with the network middleware and a recorder."""
import pytest

from offlinex import (
    NETWORK_FEATURE_KEY,
    NetworkMiddleware,
    ThunkMiddleware,
    create_network_reducer,
    create_store,
    select_action_queue,
)


class Recorder:
    """Tail middleware capturing everything that reaches the reducers."""

    def __init__(self):
        self.actions = []

    def __call__(self, store):
        def middleware(next_dispatch):
            def dispatch(action):
                self.actions.append(action)
                return next_dispatch(action)
            return dispatch
        return middleware

    @property
    def types(self):
        return [a.type for a in self.actions]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_store(recorder):
    """Build a store in a given connectivity / queue state."""

    def factory(is_connected=True, action_queue=(), middleware=None, thunks=True):
        store = create_store()
        store.register_root({
            NETWORK_FEATURE_KEY: create_network_reducer({
                "is_connected": is_connected,
                "action_queue": list(action_queue),
            })
        })
        chain = [middleware if middleware is not None else NetworkMiddleware()]
        if thunks:
            chain.append(ThunkMiddleware)
        chain.append(recorder)
        store.apply_middleware(*chain)
        return store

    return factory


def queued(store):
    """The queued actions/thunks, in queue order."""
    return [entry.action for entry in select_action_queue(store.state)]
