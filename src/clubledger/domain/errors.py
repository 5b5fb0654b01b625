"""Error taxonomy for the ledger engine.

Malformed directive lines have no error type: they are skipped
(``directives.SKIP``) and never raised.
"""

from __future__ import annotations


class LedgerError(RuntimeError):
    """Base class for ledger engine errors."""


class SourceUnavailable(LedgerError):
    """A fallback tier could not produce a player map; the next tier is tried."""


class SourceAbsent(SourceUnavailable):
    """The source answered, but holds no data yet (e.g. remote file not found)."""


class ValidationError(LedgerError):
    """Input does not have the shape of a player record collection."""


class PersistenceFailure(LedgerError):
    """Writing the player map to local or remote storage failed."""


class PersistenceConflict(PersistenceFailure):
    """The remote store rejected a write because the version token was stale."""
