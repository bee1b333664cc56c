"""Tests for the Undefined/Unset sentinels."""

import copy
import pickle

from liontype.ln import (
    Undefined,
    UndefinedType,
    Unset,
    UnsetType,
    is_sentinel,
)


class TestSingletons:
    def test_identity_survives_copy_and_pickle(self):
        for sentinel in (Undefined, Unset):
            assert copy.copy(sentinel) is sentinel
            assert copy.deepcopy(sentinel) is sentinel
            assert pickle.loads(pickle.dumps(sentinel)) is sentinel

    def test_constructing_returns_the_singleton(self):
        assert UnsetType() is Unset
        assert UndefinedType() is Undefined

    def test_falsy_and_repr(self):
        assert not Unset
        assert not Undefined
        assert repr(Unset) == "Unset"
        assert str(Undefined) == "Undefined"


class TestIsSentinel:
    def test_sentinels(self):
        assert is_sentinel(Unset)
        assert is_sentinel(Undefined)

    def test_none_opt_in(self):
        assert not is_sentinel(None)
        assert is_sentinel(None, none_as_sentinel=True)

    def test_empty_opt_in(self):
        assert is_sentinel([], empty_as_sentinel=True)
        assert is_sentinel("", empty_as_sentinel=True)
        assert not is_sentinel(0, empty_as_sentinel=True)
        assert not is_sentinel([])
