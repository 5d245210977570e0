import json
from pathlib import Path

from libgitlet import Blob, Commit, hash_blob
from libgitlet.exceptions import BlobNotFoundError, CommitNotFoundError, CorruptRepositoryError
from libgitlet.plumbing import ObjectStore, decode_commit, encode_blob, encode_commit
from pytest import fixture, raises


@fixture
def store(tmp_path: Path) -> ObjectStore:
    object_store = ObjectStore(tmp_path / 'objects')
    object_store.create()
    return object_store


def test_blob_id_depends_on_filename_and_contents() -> None:
    assert Blob('a.txt', b'x').id == Blob('a.txt', b'x').id
    assert Blob('a.txt', b'x').id != Blob('b.txt', b'x').id
    assert Blob('a.txt', b'x').id != Blob('a.txt', b'y').id
    # Length-prefixing keeps the filename/contents boundary unambiguous
    assert hash_blob('ab', b'c') != hash_blob('a', b'bc')


def test_blob_id_is_160_bit_lowercase_hex() -> None:
    blob_id = Blob('a.txt', b'x').id

    assert len(blob_id) == 40
    assert blob_id == blob_id.lower()
    int(blob_id, 16)


def test_put_blob_is_idempotent(store: ObjectStore) -> None:
    blob = Blob('a.txt', b'hello')

    first_id = store.put_blob(blob)
    stored_bytes = (store.blobs_dir() / first_id).read_bytes()
    second_id = store.put_blob(Blob('a.txt', b'hello'))

    assert first_id == second_id == blob.id
    assert [p.name for p in store.blobs_dir().iterdir()] == [blob.id]
    assert (store.blobs_dir() / first_id).read_bytes() == stored_bytes


def test_get_blob_returns_binary_contents(store: ObjectStore) -> None:
    blob = Blob('image.bin', bytes(range(256)))
    store.put_blob(blob)

    assert store.get_blob(blob.id) == blob


def test_get_missing_blob_raises_error(store: ObjectStore) -> None:
    with raises(BlobNotFoundError):
        store.get_blob('a' * 40)

    with raises(BlobNotFoundError):
        store.get_blob('not-a-hash')


def test_delete_blob(store: ObjectStore) -> None:
    blob_id = store.put_blob(Blob('a.txt', b'x'))
    store.delete_blob(blob_id)

    assert not store.has_blob(blob_id)
    # Deleting again is harmless
    store.delete_blob(blob_id)


def test_tampered_blob_raises_corruption(store: ObjectStore) -> None:
    blob_id = store.put_blob(Blob('a.txt', b'x'))
    (store.blobs_dir() / blob_id).write_bytes(encode_blob(Blob('a.txt', b'tampered')))

    with raises(CorruptRepositoryError):
        store.get_blob(blob_id)


def test_commit_encoding_is_versioned_json(store: ObjectStore) -> None:
    commit = Commit('message', 1700000000, ('b' * 40,), {'a.txt': 'c' * 40})
    store.put_commit(commit)

    document = json.loads((store.commits_dir() / commit.id).read_text())

    assert document['format'] == 1
    assert document['type'] == 'commit'
    assert document['parents'] == ['b' * 40]
    assert document['tracked_files'] == {'a.txt': 'c' * 40}
    assert store.get_commit(commit.id) == commit


def test_unknown_format_version_raises_corruption() -> None:
    document = json.loads(encode_commit(Commit.initial()))
    document['format'] = 99

    with raises(CorruptRepositoryError):
        decode_commit(json.dumps(document).encode())


def test_garbage_commit_raises_corruption(store: ObjectStore) -> None:
    commit = Commit.initial()
    store.put_commit(commit)
    (store.commits_dir() / commit.id).write_text('corrupted commit data')

    with raises(CorruptRepositoryError):
        store.get_commit(commit.id)


def test_commit_id_covers_every_field() -> None:
    base = Commit('m', 1, (), {'a': 'b' * 40})

    assert base.id == Commit('m', 1, (), {'a': 'b' * 40}).id
    assert base.id != Commit('n', 1, (), {'a': 'b' * 40}).id
    assert base.id != Commit('m', 2, (), {'a': 'b' * 40}).id
    assert base.id != Commit('m', 1, ('c' * 40,), {'a': 'b' * 40}).id
    assert base.id != Commit('m', 1, (), {'a': 'd' * 40}).id


def test_commit_rejects_more_than_two_parents() -> None:
    with raises(ValueError):
        Commit('m', 1, ('a' * 40, 'b' * 40, 'c' * 40), {})


def test_get_missing_commit_raises_error(store: ObjectStore) -> None:
    assert not store.exists_commit('a' * 40)

    with raises(CommitNotFoundError):
        store.get_commit('a' * 40)


def test_list_and_resolve_commit_ids(store: ObjectStore) -> None:
    first = Commit.initial()
    second = Commit('second', 5, (first.id,), {})
    store.put_commit(first)
    store.put_commit(second)

    assert sorted(store.list_all_commit_ids()) == sorted([first.id, second.id])
    assert store.resolve_commit_id(second.id) == second.id
    assert store.resolve_commit_id(second.id[:8]) == second.id
    assert store.resolve_commit_id(second.id[:8].upper()) == second.id


def test_resolve_commit_id_rejects_short_or_unknown_prefixes(store: ObjectStore) -> None:
    commit = Commit.initial()
    store.put_commit(commit)

    with raises(CommitNotFoundError):
        store.resolve_commit_id(commit.id[:3])

    with raises(CommitNotFoundError):
        store.resolve_commit_id('zzzzzzzz')

    unknown = '0000' if not commit.id.startswith('0000') else '1111'
    with raises(CommitNotFoundError):
        store.resolve_commit_id(unknown)
