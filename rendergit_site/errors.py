from __future__ import annotations

import enum


class RepositoryError(Exception):
    """The repository is absent, corrupt or inaccessible."""


class RevisionNotFound(RepositoryError):
    """A revision name does not designate a commit."""


class ObjectLookupError(RepositoryError):
    """An object id could not be read from the object database."""


class CommitLookupError(ObjectLookupError):
    """A commit snapshot could not be built from a revision id."""


class RefResolutionError(ObjectLookupError):
    """A reference could not be resolved or peeled to a commit."""


class FailurePolicy(enum.Enum):
    """What a traversal does when one of its items fails to resolve.

    STOP ends the traversal and keeps everything written so far, SKIP
    drops the failing item and carries on, ABORT re-raises so the whole
    page (and with it the run) fails.
    """

    STOP = "stop"
    SKIP = "skip"
    ABORT = "abort"
