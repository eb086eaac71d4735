"""
Exceptions for caller misuse.

A rejected action is not an error: it comes back as an ActionResult with a
reason. These exceptions mean the caller asked for something that cannot
exist (an unknown action, a turn that already passed, no loaded world).
"""


class EngineError(Exception):
    """Base exception for engine misuse."""
    pass


class UnknownActionError(EngineError):
    """Action id is not in the domain's catalog."""

    def __init__(self, action_id: str, domain: str = ""):
        self.action_id = action_id
        self.domain = domain
        where = f" in {domain} catalog" if domain else ""
        super().__init__(f"Unknown action '{action_id}'{where}")


class TurnError(EngineError):
    """Base exception for turn advancement errors."""
    pass


class StaleTurnError(TurnError):
    """Advance requested for a turn earlier than one already processed."""

    def __init__(self, requested: int, last_advanced: int):
        self.requested = requested
        self.last_advanced = last_advanced
        super().__init__(
            f"Cannot advance to turn {requested}: turn {last_advanced} already processed"
        )


class NoWorldLoadedError(EngineError):
    """World manager operation needs a current world."""

    def __init__(self):
        super().__init__("No world loaded")
