from pathlib import Path

from click.testing import CliRunner, Result
from libgitlet.cli import cli
from libgitlet.repository import Repository
from pytest import fixture


@fixture
def run(temp_repo_dir: Path):
    runner = CliRunner()

    def invoke(*args: str) -> Result:
        return runner.invoke(cli, ['--work-tree', str(temp_repo_dir), *args])

    return invoke


@fixture
def initialized(run, temp_repo_dir: Path) -> Repository:
    assert run('init').exit_code == 0
    return Repository(temp_repo_dir)


def _commit(run, work_dir: Path, filename: str, contents: str, message: str) -> None:
    (work_dir / filename).write_text(contents)
    assert run('add', filename).exit_code == 0
    assert run('commit', message).exit_code == 0


def test_init(run, temp_repo_dir: Path) -> None:
    result = run('init')

    assert result.exit_code == 0
    assert (temp_repo_dir / '.gitlet' / 'HEAD').is_file()

    result = run('init')
    assert result.exit_code == 1
    assert 'A Gitlet version-control system already exists in the current directory.' in result.output


def test_commands_outside_repository_fail(run) -> None:
    result = run('status')

    assert result.exit_code == 1
    assert result.output == 'Not in an initialized Gitlet directory.\n'


def test_add_missing_file_prints_message(run, initialized: Repository) -> None:
    result = run('add', 'missing.txt')

    assert result.exit_code == 1
    assert result.output == 'File does not exist.\n'


def test_commit_and_log(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'a.txt', 'a', 'add a')

    result = run('log')

    assert result.exit_code == 0
    blocks = result.output.split('===\n')[1:]
    assert len(blocks) == 2
    assert blocks[0].startswith(f'commit {initialized.head_commit_id()}\nDate: ')
    assert 'add a' in blocks[0]
    assert 'initial commit' in blocks[1]


def test_log_shows_merge_parents(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'base.txt', 'base', 'base')
    run('branch', 'other')
    _commit(run, temp_repo_dir, 'a.txt', 'a', 'master side')
    run('checkout', 'other')
    _commit(run, temp_repo_dir, 'b.txt', 'b', 'other side')
    run('checkout', 'master')
    first_parent = initialized.head_commit_id()
    second_parent = initialized.refs.get_branch_head('other')

    assert run('merge', 'other').exit_code == 0

    output = run('log').output
    assert f'Merge: {first_parent[:7]} {second_parent[:7]}\n' in output
    assert 'Merged other into master.' in output


def test_find_and_global_log(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'a.txt', 'a', 'needle')

    result = run('find', 'needle')
    assert result.exit_code == 0
    assert result.output == f'{initialized.head_commit_id()}\n'

    result = run('find', 'haystack')
    assert result.exit_code == 1
    assert result.output == 'Found no commit with that message.\n'

    assert run('global-log').output.count('===\n') == 2


def test_status_output(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'tracked.txt', 'v1', 'track')
    run('branch', 'other')
    (temp_repo_dir / 'staged.txt').write_text('s')
    run('add', 'staged.txt')
    (temp_repo_dir / 'tracked.txt').write_text('v2')
    (temp_repo_dir / 'loose.txt').write_text('l')

    result = run('status')

    assert result.exit_code == 0
    assert result.output == ('=== Branches ===\n'
                             '*master\n'
                             'other\n'
                             '\n'
                             '=== Staged Files ===\n'
                             'staged.txt\n'
                             '\n'
                             '=== Removed Files ===\n'
                             '\n'
                             '=== Modifications Not Staged For Commit ===\n'
                             'tracked.txt (modified)\n'
                             '\n'
                             '=== Untracked Files ===\n'
                             'loose.txt\n')


def test_checkout_forms(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'f.txt', 'v1', 'v1')
    first = initialized.head_commit_id()
    _commit(run, temp_repo_dir, 'f.txt', 'v2', 'v2')

    (temp_repo_dir / 'f.txt').write_text('scratch')
    assert run('checkout', '--', 'f.txt').exit_code == 0
    assert (temp_repo_dir / 'f.txt').read_text() == 'v2'

    assert run('checkout', first[:6], '--', 'f.txt').exit_code == 0
    assert (temp_repo_dir / 'f.txt').read_text() == 'v1'

    run('branch', 'other')
    assert run('checkout', 'other').exit_code == 0
    assert initialized.current_branch() == 'other'


def test_checkout_with_incorrect_operands(run, initialized: Repository) -> None:
    result = run('checkout', 'a', 'b')

    assert result.exit_code == 1
    assert result.output == 'Incorrect operands.\n'


def test_branch_errors(run, initialized: Repository) -> None:
    assert run('branch', 'feature').exit_code == 0

    result = run('branch', 'feature')
    assert result.exit_code == 1
    assert result.output == 'A branch with that name already exists.\n'

    result = run('rm-branch', 'master')
    assert result.exit_code == 1
    assert result.output == 'Cannot remove the current branch.\n'

    assert run('rm-branch', 'feature').exit_code == 0
    assert initialized.refs.list_branches() == {'master'}


def test_reset(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'f.txt', 'v1', 'v1')
    first = initialized.head_commit_id()
    _commit(run, temp_repo_dir, 'f.txt', 'v2', 'v2')

    assert run('reset', first).exit_code == 0
    assert initialized.head_commit_id() == first
    assert (temp_repo_dir / 'f.txt').read_text() == 'v1'


def test_merge_not_needed_is_reported_without_failure(run, initialized: Repository, temp_repo_dir: Path) -> None:
    run('branch', 'other')
    _commit(run, temp_repo_dir, 'f.txt', 'ahead', 'ahead')

    result = run('merge', 'other')

    assert result.exit_code == 0
    assert 'Given branch is an ancestor of the current branch.' in result.output


def test_merge_conflict_is_reported(run, initialized: Repository, temp_repo_dir: Path) -> None:
    _commit(run, temp_repo_dir, 'base.txt', 'base', 'base')
    run('branch', 'other')
    _commit(run, temp_repo_dir, 'f.txt', 'A', 'A')
    run('checkout', 'other')
    _commit(run, temp_repo_dir, 'f.txt', 'B', 'B')
    run('checkout', 'master')

    result = run('merge', 'other')

    assert result.exit_code == 0
    assert 'Encountered a merge conflict.' in result.output
    assert (temp_repo_dir / 'f.txt').read_text() == '<<<<<<< HEAD\nA=======\nB>>>>>>>'
