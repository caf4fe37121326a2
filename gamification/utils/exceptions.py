"""Engine exception hierarchy.

Expected outcomes such as rejected claims are returned as values, not raised;
everything here is either infrastructural or a programming/data error.
"""


class GamificationError(RuntimeError):
    """Base exception for gamification engine errors."""


class PersistenceError(GamificationError):
    """A repository call failed; the enclosing transaction was rolled back."""


class InvariantViolationError(GamificationError):
    """Stored state breaks an engine invariant (corrupt data or a bug)."""


class CatalogError(GamificationError):
    """The static mission/achievement catalog is malformed."""


class LockTimeoutError(GamificationError):
    """A per-player lock could not be acquired in time."""
