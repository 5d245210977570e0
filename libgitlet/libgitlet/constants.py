"""Constants shared across libgitlet."""

DEFAULT_REPO_DIR = '.gitlet'
DEFAULT_BRANCH = 'master'

HEAD_FILE = 'HEAD'
INDEX_FILE = 'index'
REFS_DIR = 'refs'
BRANCHES_DIR = 'branches'
OBJECTS_SUBDIR = 'objects'
BLOBS_DIR = 'blobs'
COMMITS_DIR = 'commits'

INITIAL_COMMIT_MESSAGE = 'initial commit'
INITIAL_COMMIT_TIMESTAMP = 0

# Version tag written into every encoded blob, commit and index document
FORMAT_VERSION = 1

HASH_LENGTH = 40
HASH_CHARSET = '0123456789abcdef'
MIN_ABBREV_LENGTH = 4
SHORT_HASH_LENGTH = 7

CONFLICT_HEAD_MARKER = b'<<<<<<< HEAD\n'
CONFLICT_SEPARATOR = b'=======\n'
CONFLICT_END_MARKER = b'>>>>>>>'
