"""
Foreign affairs actions.

Every diplomatic action targets a foreign country. Relationship, tension
and intelligence deltas land on that country; bloc_relationship spreads to
the other members of its bloc.
"""

from ..state.schema import Domain, EffectBundle as E, TargetKind, Track, TreatyType, WorldFlag
from .models import ActionDefinition, DiplomacyCategory as C, RiskTier, define

COUNTRY = TargetKind.COUNTRY


def _action(category: C, id: str, name: str, description: str, **kwargs) -> ActionDefinition:
    kwargs.setdefault("target", COUNTRY)
    return define(Domain.DIPLOMACY, category, id, name, description, **kwargs)


DIPLOMACY_ACTIONS: list[ActionDefinition] = [
    # Observer (Position 1+)
    _action(
        C.OBSERVER, "request_briefing", "Request Country Briefing",
        "Request a detailed briefing on a specific country's situation.",
        base_chance=100, risk=RiskTier.MINIMAL,
        success=E(standing=1),
    ),
    _action(
        C.OBSERVER, "attend_reception", "Attend Embassy Reception",
        "Attend a diplomatic reception to gather information and make contacts.",
        cooldown=2, base_chance=90, risk=RiskTier.MINIMAL,
        success=E(relationship=1, network=1),
    ),

    # Analyst (Position 2+)
    _action(
        C.ANALYST, "draft_cable", "Draft Diplomatic Cable",
        "Draft a diplomatic cable recommending a course of action to superiors.",
        cooldown=1, base_chance=85, risk=RiskTier.LOW,
        success=E(standing=2),
    ),
    _action(
        C.ANALYST, "request_intel", "Request Intelligence Assessment",
        "Request an intelligence assessment on a foreign power's intentions.",
        cooldown=2, base_chance=80, risk=RiskTier.LOW,
        success=E(intelligence=5),
    ),

    # Departmental (Position 3+)
    _action(
        C.DEPARTMENTAL, "propose_cultural_exchange", "Propose Cultural Exchange",
        "Propose a cultural exchange program with a foreign nation.",
        committee=True, cooldown=5, execution=2, base_chance=70, risk=RiskTier.LOW,
        success=E(relationship=8, treasury=-5, standing=3),
        failure=E(standing=-2),
    ),
    _action(
        C.DEPARTMENTAL, "lobby_trade_policy", "Lobby for Trade Policy",
        "Lobby the Standing Committee for a specific trade policy with a nation.",
        cooldown=3, base_chance=60, risk=RiskTier.MODERATE,
        success=E(standing=5),
        failure=E(standing=-3),
    ),
    _action(
        C.DEPARTMENTAL, "meet_foreign_official", "Meet Foreign Official",
        "Arrange a meeting with a foreign diplomatic official.",
        cooldown=2, base_chance=75, risk=RiskTier.LOW,
        success=E(relationship=3, network=2),
    ),
    _action(
        C.DEPARTMENTAL, "recommend_protest", "Recommend Diplomatic Protest",
        "Recommend that the Foreign Ministry issue a diplomatic protest.",
        cooldown=2, base_chance=80, risk=RiskTier.MODERATE,
        success=E(tension=5, standing=2),
    ),

    # Senior (Position 4+)
    _action(
        C.SENIOR, "negotiate_trade", "Negotiate Trade Agreement",
        "Directly negotiate trade terms with a foreign nation.",
        committee=True, cooldown=5, execution=3, base_chance=65, risk=RiskTier.MODERATE,
        success=E(relationship=10, treasury=15, standing=5, treaty=TreatyType.TRADE_AGREEMENT),
        failure=E(relationship=-5, standing=-3),
    ),
    _action(
        C.SENIOR, "sponsor_treaty", "Sponsor Treaty Proposal",
        "Sponsor a treaty proposal in the Standing Committee.",
        committee=True, cooldown=8, execution=2, base_chance=55, risk=RiskTier.HIGH,
        success=E(relationship=15, standing=8),
        failure=E(standing=-5),
    ),
    _action(
        C.SENIOR, "expand_embassy", "Approve Embassy Expansion",
        "Approve expansion of embassy staff and facilities in a country.",
        cooldown=10, base_chance=85, risk=RiskTier.LOW,
        success=E(relationship=5, treasury=-10, intelligence=10),
    ),
    _action(
        C.SENIOR, "authorize_backchannel", "Authorize Back-Channel",
        "Authorize secret back-channel communications with foreign officials.",
        cooldown=5, base_chance=70, risk=RiskTier.HIGH,
        success=E(relationship=5, intelligence=8),
        failure=E(relationship=-10, tension=10),
    ),

    # Executive (Position 5+)
    _action(
        C.EXECUTIVE, "propose_defense_pact", "Propose Mutual Defense Pact",
        "Propose a mutual defense treaty with an allied nation.",
        committee=True, cooldown=15, execution=5, base_chance=50, risk=RiskTier.HIGH,
        success=E(
            relationship=25, bloc_relationship=-10, tension=15, standing=10,
            treaty=TreatyType.MUTUAL_DEFENSE,
        ),
        failure=E(relationship=-10, standing=-5),
    ),
    _action(
        C.EXECUTIVE, "direct_espionage", "Direct Espionage Operations",
        "Direct intelligence operations against a foreign target.",
        track=Track.SECURITY, cooldown=3, base_chance=60, risk=RiskTier.HIGH,
        success=E(intelligence=15),
        failure=E(relationship=-15, tension=20, counter_intel=10),
    ),
    _action(
        C.EXECUTIVE, "issue_ultimatum", "Issue Diplomatic Ultimatum",
        "Issue an ultimatum demanding specific concessions from a nation.",
        committee=True, decree=True, cooldown=10, execution=1, base_chance=40, risk=RiskTier.EXTREME,
        success=E(relationship=-20, tension=30, standing=10),
        failure=E(relationship=-30, tension=40, standing=-10),
    ),
    _action(
        C.EXECUTIVE, "negotiate_aid", "Negotiate Aid Package",
        "Negotiate foreign aid to give or receive from another nation.",
        committee=True, cooldown=8, execution=2, base_chance=70, risk=RiskTier.MODERATE,
        success=E(relationship=15, bloc_relationship=5, treasury=-20, treaty=TreatyType.AID_PACKAGE),
    ),
    _action(
        C.EXECUTIVE, "recall_ambassador", "Recall Ambassador",
        "Recall the ambassador from a foreign nation as a diplomatic signal.",
        cooldown=5, base_chance=100, risk=RiskTier.HIGH,
        success=E(relationship=-20, tension=15, intelligence=-10),
    ),
    _action(
        C.EXECUTIVE, "expel_diplomats", "Expel Foreign Diplomats",
        "Expel diplomats from a foreign nation, often as counterintelligence measure.",
        cooldown=8, base_chance=100, risk=RiskTier.HIGH,
        success=E(relationship=-25, tension=20, counter_intel=-20),
    ),

    # Supreme (Position 7+)
    _action(
        C.SUPREME, "summit_diplomacy", "Summit Diplomacy",
        "Conduct direct leader-to-leader summit negotiations.",
        decree=True, cooldown=20, execution=3, base_chance=60, risk=RiskTier.EXTREME,
        success=E(relationship=30, tension=-20, standing=15),
        failure=E(relationship=-15, tension=10, standing=-10),
    ),
    _action(
        C.SUPREME, "declare_sanctions", "Declare Economic Sanctions",
        "Impose comprehensive economic sanctions on a nation.",
        committee=True, decree=True, cooldown=15, base_chance=100, risk=RiskTier.EXTREME,
        success=E(
            relationship=-40, bloc_relationship=5, tension=35,
            sets_flag=WorldFlag.SANCTIONS_ACTIVE,
        ),
    ),
    _action(
        C.SUPREME, "authorize_intervention", "Authorize Military Intervention",
        "Authorize military intervention in a foreign conflict.",
        committee=True, decree=True, cooldown=25, execution=5, base_chance=50, risk=RiskTier.EXTREME,
        success=E(
            relationship=-50, tension=50, treasury=-50, standing=15,
            sets_flag=WorldFlag.MILITARY_INTERVENTION,
        ),
        failure=E(relationship=-60, tension=60, treasury=-75, standing=-20),
    ),
    _action(
        C.SUPREME, "nuclear_posturing", "Nuclear Posturing",
        "Signal nuclear readiness as a diplomatic threat.",
        decree=True, cooldown=30, base_chance=80, risk=RiskTier.EXTREME,
        success=E(relationship=-30, tension=50, standing=-5, sets_flag=WorldFlag.NUCLEAR_ALERT),
    ),
    _action(
        C.SUPREME, "recognize_government", "Recognize New Government",
        "Formally recognize a new or rival government in a country.",
        committee=True, decree=True, cooldown=20, base_chance=100, risk=RiskTier.HIGH,
        success=E(relationship=40, bloc_relationship=-15, tension=20),
    ),
    _action(
        C.SUPREME, "abrogate_treaty", "Abrogate Treaty",
        "Unilaterally withdraw from an existing treaty.",
        target=TargetKind.TREATY, decree=True, cooldown=15, base_chance=100, risk=RiskTier.HIGH,
        success=E(relationship=-35, bloc_relationship=-10, tension=25),
    ),
]
