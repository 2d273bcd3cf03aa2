"""Exception types raised by the workforce model.

Every failure mode in the core has a state-preserving fallback; these types
let callers (the `StateManager`, the CLI, the dashboard) tell a rejected
input apart from an unexpected bug.
"""


class WorkforceModelError(Exception):
    """Root of all errors raised deliberately by the workforce model."""


class PopulationDataError(WorkforceModelError, ValueError):
    """Population CSV is malformed (missing columns, non-numeric values, no rows)."""


class ScenarioError(WorkforceModelError, ValueError):
    """A scenario lifecycle transition was requested in a state that does not allow it."""


class ScenarioNotFoundError(ScenarioError, KeyError):
    """A scenario id or file could not be resolved."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class UnappliedChangesError(ScenarioError):
    """Switching scenarios would discard edits the user has not confirmed losing."""
