from pathlib import Path

from libgitlet.exceptions import (BranchExistsError, BranchNotFoundError, CorruptRepositoryError,
                                  InvalidOperationError, RepositoryNotFoundError)
from libgitlet.ref import RefStore
from pytest import fixture, raises

COMMIT_A = 'a' * 40
COMMIT_B = 'b' * 40


@fixture
def refs(tmp_path: Path) -> RefStore:
    ref_store = RefStore(tmp_path / 'HEAD', tmp_path / 'refs' / 'branches')
    ref_store.create()
    return ref_store


def test_current_branch_without_head_raises_error(refs: RefStore) -> None:
    with raises(RepositoryNotFoundError):
        refs.current_branch()


def test_set_head_and_branch_heads(refs: RefStore) -> None:
    refs.set_branch_head('master', COMMIT_A)
    refs.set_head('master')

    assert refs.current_branch() == 'master'
    assert refs.get_branch_head('master') == COMMIT_A

    refs.set_branch_head('master', COMMIT_B)
    assert refs.get_branch_head('master') == COMMIT_B
    assert (refs.branches_dir / 'master').read_text() == COMMIT_B


def test_create_branch(refs: RefStore) -> None:
    refs.create_branch('feature', COMMIT_A)

    assert refs.list_branches() == {'feature'}

    with raises(BranchExistsError):
        refs.create_branch('feature', COMMIT_B)
    assert refs.get_branch_head('feature') == COMMIT_A


def test_invalid_branch_names_raise_value_error(refs: RefStore) -> None:
    with raises(ValueError, match='Branch name is required'):
        refs.create_branch('', COMMIT_A)

    with raises(ValueError):
        refs.create_branch('../escape', COMMIT_A)


def test_get_missing_branch_raises_error(refs: RefStore) -> None:
    with raises(BranchNotFoundError):
        refs.get_branch_head('missing')


def test_empty_branch_file_raises_corruption(refs: RefStore) -> None:
    (refs.branches_dir / 'broken').write_text('')

    with raises(CorruptRepositoryError):
        refs.get_branch_head('broken')


def test_delete_branch(refs: RefStore) -> None:
    refs.set_branch_head('master', COMMIT_A)
    refs.set_head('master')
    refs.create_branch('feature', COMMIT_A)

    refs.delete_branch('feature')
    assert refs.list_branches() == {'master'}

    with raises(BranchNotFoundError):
        refs.delete_branch('feature')


def test_delete_current_branch_raises_error(refs: RefStore) -> None:
    refs.set_branch_head('master', COMMIT_A)
    refs.set_head('master')

    with raises(InvalidOperationError):
        refs.delete_branch('master')
    assert refs.branch_exists('master')


def test_names_outside_branches_dir_are_not_branches(refs: RefStore) -> None:
    refs.set_branch_head('master', COMMIT_A)
    refs.set_head('master')

    for name in ('../../HEAD', '..', '.', '', 'a\\b'):
        assert not refs.branch_exists(name)
        with raises(BranchNotFoundError):
            refs.get_branch_head(name)
        with raises(BranchNotFoundError):
            refs.delete_branch(name)

    assert refs.head_file.is_file()
    assert refs.current_branch() == 'master'
