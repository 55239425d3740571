"""The JSON view driven side by side with a dict."""
from kvdb import open_kvdb

VALUES = [False, 2, None, 'foo', [1, 'a', True, {'foo': 'bar'}, None], {'hello': 'world', 'foo': 2}]
ENTRIES = [(str(i), v) for i, v in enumerate(VALUES)]


def test_behaves_like_dict():
    ref = {}
    with open_kvdb().json as kv:
        for key, value in ENTRIES:
            ref[key] = value
            kv.set(key, value)
            assert kv.size == len(ref)

        first = ENTRIES[0][0]
        assert kv.has(first) is (first in ref)
        assert kv.has('not a key') is ('not a key' in ref)

        for key in ref:
            assert kv.get(key) == ref.get(key)

        assert list(kv.keys()) == sorted(ref)
        assert list(kv.values()) == [ref[k] for k in sorted(ref)]
        assert list(kv.entries()) == sorted(ref.items())
        assert len(kv) == len(ref)

        del ref[first]
        kv.delete(first)
        assert kv.size == len(ref)

        ref.clear()
        kv.clear()
        assert kv.size == len(ref) == 0
