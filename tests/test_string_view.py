import pytest

ENTRIES = [('hello', 'world'), ('foo', 'bar')]


def test_memory_scenario():
    from kvdb import open_kvdb
    kv = open_kvdb(':memory:')
    try:
        kv.set('hello', 'world')
        assert kv.get('hello') == 'world'
        assert kv.size == 1
        kv.clear()
        assert kv.size == 0
    finally:
        kv.close()


def test_initial_size_is_zero(kv):
    assert kv.size == 0
    assert len(kv) == 0


def test_set_get_has(kv):
    for key, value in ENTRIES:
        assert kv.has(key) is False
        assert kv.get(key) is None
        kv.set(key, value)
        assert kv.has(key) is True
        assert kv.get(key) == value
    assert kv.size == len(ENTRIES)
    assert 'hello' in kv and 'nope' not in kv


def test_overwrite_keeps_size(kv):
    kv.set('k', 'v1')
    kv.set('k', 'v2')
    assert kv.size == 1
    assert kv.get('k') == 'v2'


def test_empty_string_is_not_absent(kv):
    kv.set('empty', '')
    assert kv.get('empty') == ''
    assert kv.has('empty') is True


def test_keys_and_values_coerced_to_text(kv):
    kv.set(1, 2)
    assert kv.get('1') == '2'
    assert kv.has(1) is True


def test_iteration_sorted_by_key(kv):
    for key, value in ENTRIES:
        kv.set(key, value)
    assert list(kv.keys()) == ['foo', 'hello']
    assert list(kv.values()) == ['bar', 'world']
    assert list(kv.entries()) == [('foo', 'bar'), ('hello', 'world')]
    assert list(kv) == list(kv.entries())


def test_entries_pair_keys_with_get(kv):
    for i in range(10):
        kv.set(f'k{i}', f'v{9 - i}')
    entries = list(kv.entries())
    assert len(entries) == kv.size == len(list(kv.keys())) == len(list(kv.values()))
    for key, value in entries:
        assert kv.get(key) == value


def test_sequences_are_single_pass_and_restartable(kv):
    kv.set('a', '1')
    kv.set('b', '2')
    it = kv.keys()
    assert list(it) == ['a', 'b']
    assert list(it) == []
    assert list(kv.keys()) == ['a', 'b']


def test_independent_iterators(kv):
    kv.set('a', '1')
    kv.set('b', '2')
    first, second = kv.values(), kv.values()
    assert next(first) == '1'
    assert list(second) == ['1', '2']
    assert list(first) == ['2']


def test_mutation_during_iteration_does_not_crash(kv):
    for i in range(5):
        kv.set(f'k{i}', str(i))
    seen = []
    for key, _ in kv.entries():
        seen.append(key)
        kv.delete(key)
        kv.set('k4', 'changed')
    assert seen  # content is implementation-defined
    assert kv.size <= 5


def test_delete(kv):
    for key, value in ENTRIES:
        kv.set(key, value)
    kv.delete('hello')
    assert kv.has('hello') is False
    assert kv.size == len(ENTRIES) - 1


def test_delete_absent_key_is_noop(kv):
    kv.set('a', '1')
    kv.delete('missing')
    assert kv.size == 1


def test_clear(kv):
    for key, value in ENTRIES:
        kv.set(key, value)
    kv.clear()
    assert kv.size == 0
    for key, _ in ENTRIES:
        assert kv.has(key) is False


def test_persists_across_handles(db_path):
    from kvdb import open_kvdb
    with open_kvdb(db_path) as kv:
        kv.set('persist', 'yes')
    with open_kvdb({'path': str(db_path)}) as kv:
        assert kv.get('persist') == 'yes'
        assert kv.path == str(db_path)


def test_reads_rows_written_outside(seeded_file):
    from kvdb import open_kvdb
    with open_kvdb(seeded_file) as kv:
        assert list(kv.keys()) == ['a', 'b']
        assert kv.json.get('b') == 'two'
