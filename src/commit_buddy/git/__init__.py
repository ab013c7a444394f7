"""Repository access for commit-buddy."""

from commit_buddy.git.errors import DirtyStateError, GitError, MalformedDiffError, RefNotFoundError, RepoError
from commit_buddy.git.models import ChangeKind, CommitRef, FileChange, Hunk, HunkLine, LineOrigin
from commit_buddy.git.reader import RepositoryReader

__all__ = [
	"ChangeKind",
	"CommitRef",
	"DirtyStateError",
	"FileChange",
	"GitError",
	"Hunk",
	"HunkLine",
	"LineOrigin",
	"MalformedDiffError",
	"RefNotFoundError",
	"RepoError",
	"RepositoryReader",
]
