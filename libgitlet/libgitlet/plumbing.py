"""Object encodings and the content-addressed object store."""

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import Any

from .constants import BLOBS_DIR, COMMITS_DIR, FORMAT_VERSION, HASH_CHARSET, HASH_LENGTH, MIN_ABBREV_LENGTH
from .exceptions import BlobNotFoundError, CommitNotFoundError, CorruptRepositoryError
from .objects import Blob, Commit

logger = logging.getLogger(__name__)


def _dump(document: dict[str, Any]) -> bytes:
    return json.dumps(document, sort_keys=True, indent=2, ensure_ascii=False).encode('utf-8')


def _load(data: bytes, kind: str) -> dict[str, Any]:
    try:
        document = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        msg = f'Unreadable {kind} encoding'
        raise CorruptRepositoryError(msg) from e

    if not isinstance(document, dict) or document.get('type') != kind:
        msg = f'Expected a {kind} document'
        raise CorruptRepositoryError(msg)
    if document.get('format') != FORMAT_VERSION:
        msg = f'Unsupported {kind} format version: {document.get("format")!r}'
        raise CorruptRepositoryError(msg)

    return document


def encode_blob(blob: Blob) -> bytes:
    return _dump({'type': 'blob',
                  'format': FORMAT_VERSION,
                  'filename': blob.filename,
                  'contents': base64.b64encode(blob.contents).decode('ascii')})


def decode_blob(data: bytes) -> Blob:
    document = _load(data, 'blob')
    try:
        return Blob(document['filename'], base64.b64decode(document['contents'], validate=True))
    except (KeyError, TypeError, binascii.Error) as e:
        msg = 'Malformed blob document'
        raise CorruptRepositoryError(msg) from e


def encode_commit(commit: Commit) -> bytes:
    return _dump({'type': 'commit',
                  'format': FORMAT_VERSION,
                  'message': commit.message,
                  'timestamp': commit.timestamp,
                  'parents': list(commit.parents),
                  'tracked_files': commit.tracked_files})


def decode_commit(data: bytes) -> Commit:
    document = _load(data, 'commit')
    try:
        return Commit(document['message'], document['timestamp'],
                      tuple(document['parents']), document['tracked_files'])
    except (KeyError, TypeError, ValueError) as e:
        msg = 'Malformed commit document'
        raise CorruptRepositoryError(msg) from e


def is_hash(value: str) -> bool:
    return len(value) == HASH_LENGTH and all(c in HASH_CHARSET for c in value)


class ObjectStore:
    """Content-addressed storage for blobs and commits under an objects directory.

    Every object lives in its own file named by its id. Reads verify that the
    decoded object hashes back to the id it was stored under."""

    def __init__(self, objects_dir: Path | str) -> None:
        self.objects_dir = Path(objects_dir)

    def blobs_dir(self) -> Path:
        return self.objects_dir / BLOBS_DIR

    def commits_dir(self) -> Path:
        return self.objects_dir / COMMITS_DIR

    def create(self) -> None:
        """Create the on-disk directories for a new store."""
        self.blobs_dir().mkdir(parents=True)
        self.commits_dir().mkdir(parents=True)

    def put_blob(self, blob: Blob) -> str:
        """Persist a blob and return its id. Storing identical content twice writes once.

        :param blob: The blob to store.
        :return: The blob id."""
        path = self.blobs_dir() / blob.id
        if not path.exists():
            path.write_bytes(encode_blob(blob))
            logger.debug('Stored blob %s for %s', blob.id, blob.filename)

        return blob.id

    def has_blob(self, blob_id: str) -> bool:
        return is_hash(blob_id) and (self.blobs_dir() / blob_id).is_file()

    def get_blob(self, blob_id: str) -> Blob:
        """Load a blob by id.

        :param blob_id: The id of the blob.
        :return: The stored Blob.
        :raises BlobNotFoundError: If no blob with that id exists.
        :raises CorruptRepositoryError: If the stored blob is unreadable or does not match its id."""
        if not self.has_blob(blob_id):
            msg = f'No blob with id {blob_id}'
            raise BlobNotFoundError(msg)

        blob = decode_blob((self.blobs_dir() / blob_id).read_bytes())
        if blob.id != blob_id:
            msg = f'Blob {blob_id} does not match its content'
            raise CorruptRepositoryError(msg)

        return blob

    def delete_blob(self, blob_id: str) -> None:
        path = self.blobs_dir() / blob_id
        if is_hash(blob_id) and path.exists():
            path.unlink()
            logger.debug('Deleted blob %s', blob_id)

    def put_commit(self, commit: Commit) -> str:
        """Persist a commit and return its id. Existing commits are never rewritten.

        :param commit: The commit to store.
        :return: The commit id."""
        path = self.commits_dir() / commit.id
        if not path.exists():
            path.write_bytes(encode_commit(commit))
            logger.debug('Stored commit %s', commit.id)

        return commit.id

    def exists_commit(self, commit_id: str) -> bool:
        return is_hash(commit_id) and (self.commits_dir() / commit_id).is_file()

    def get_commit(self, commit_id: str) -> Commit:
        """Load a commit by id.

        :param commit_id: The full id of the commit.
        :return: The stored Commit.
        :raises CommitNotFoundError: If no commit with that id exists.
        :raises CorruptRepositoryError: If the stored commit is unreadable or does not match its id."""
        if not self.exists_commit(commit_id):
            msg = 'No commit with that id exists.'
            raise CommitNotFoundError(msg)

        commit = decode_commit((self.commits_dir() / commit_id).read_bytes())
        if commit.id != commit_id:
            msg = f'Commit {commit_id} does not match its content'
            raise CorruptRepositoryError(msg)

        return commit

    def list_all_commit_ids(self) -> list[str]:
        """Return the ids of every stored commit, in no particular order."""
        return [path.name for path in self.commits_dir().iterdir() if path.is_file() and is_hash(path.name)]

    def resolve_commit_id(self, prefix: str) -> str:
        """Expand a full or abbreviated commit id to the full id.

        :param prefix: A full id, or a unique prefix of at least four hex characters.
        :return: The full commit id.
        :raises CommitNotFoundError: If the prefix is too short, matches nothing, or is ambiguous."""
        prefix = prefix.lower()
        if self.exists_commit(prefix):
            return prefix

        if len(prefix) < MIN_ABBREV_LENGTH or not all(c in HASH_CHARSET for c in prefix):
            msg = 'No commit with that id exists.'
            raise CommitNotFoundError(msg)

        matches = [commit_id for commit_id in self.list_all_commit_ids() if commit_id.startswith(prefix)]
        if not matches:
            msg = 'No commit with that id exists.'
            raise CommitNotFoundError(msg)
        if len(matches) > 1:
            msg = f'Commit id {prefix} is ambiguous.'
            raise CommitNotFoundError(msg)

        return matches[0]
