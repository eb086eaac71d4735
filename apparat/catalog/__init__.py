"""Static action catalogs, one per domain."""

from typing import Iterator

from ..errors import UnknownActionError
from ..state.schema import Domain
from .diplomacy import DIPLOMACY_ACTIONS
from .ministry import MINISTRY_ACTIONS
from .models import (
    RISK_MODIFIERS,
    ActionDefinition,
    DiplomacyCategory,
    MinistryCategory,
    RiskTier,
    SecurityCategory,
    category_min_rank,
)
from .security import SECURITY_ACTIONS


class Catalog:
    """Read-only lookup over one domain's action table."""

    def __init__(self, domain: Domain, actions: list[ActionDefinition]):
        self.domain = domain
        self._actions: dict[str, ActionDefinition] = {}
        for action in actions:
            if action.id in self._actions:
                raise ValueError(f"Duplicate action id '{action.id}' in {domain.value} catalog")
            self._actions[action.id] = action

    def __iter__(self) -> Iterator[ActionDefinition]:
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, action_id: str) -> bool:
        return action_id in self._actions

    def get(self, action_id: str) -> ActionDefinition | None:
        return self._actions.get(action_id)

    def require(self, action_id: str) -> ActionDefinition:
        action = self._actions.get(action_id)
        if action is None:
            raise UnknownActionError(action_id, self.domain.value)
        return action

    def for_rank(self, rank: int) -> list[ActionDefinition]:
        """Actions a holder of this position may attempt."""
        return [a for a in self if a.min_rank <= rank]

    def locked_for_rank(self, rank: int) -> list[ActionDefinition]:
        """Actions still above this position, for previewing what promotion opens."""
        return [a for a in self if a.min_rank > rank]

    def by_category(self, category: str) -> list[ActionDefinition]:
        value = getattr(category, "value", category)
        return [a for a in self if a.category == value]


SECURITY_CATALOG = Catalog(Domain.SECURITY, SECURITY_ACTIONS)
DIPLOMACY_CATALOG = Catalog(Domain.DIPLOMACY, DIPLOMACY_ACTIONS)
MINISTRY_CATALOG = Catalog(Domain.MINISTRY, MINISTRY_ACTIONS)

CATALOGS: dict[Domain, Catalog] = {
    Domain.SECURITY: SECURITY_CATALOG,
    Domain.DIPLOMACY: DIPLOMACY_CATALOG,
    Domain.MINISTRY: MINISTRY_CATALOG,
}


def get_catalog(domain: Domain) -> Catalog:
    return CATALOGS[domain]


__all__ = [
    "ActionDefinition",
    "Catalog",
    "CATALOGS",
    "DIPLOMACY_CATALOG",
    "DiplomacyCategory",
    "MINISTRY_CATALOG",
    "MinistryCategory",
    "RISK_MODIFIERS",
    "RiskTier",
    "SECURITY_CATALOG",
    "SecurityCategory",
    "category_min_rank",
    "get_catalog",
]
