"""
Security apparatus actions.

Thirty position-gated actions modeled on a party discipline commission:
operatives watch, investigators build files, case officers detain,
the directorate and command levels prosecute, the director purges.
"""

from ..state.schema import Domain, EffectBundle as E, TargetKind, Track, WorldFlag
from .models import ActionDefinition, RiskTier, SecurityCategory as C, define

CHAR = TargetKind.CHARACTER


def _action(category: C, id: str, name: str, description: str, **kwargs) -> ActionDefinition:
    kwargs.setdefault("track", Track.SECURITY)
    return define(Domain.SECURITY, category, id, name, description, **kwargs)


SECURITY_ACTIONS: list[ActionDefinition] = [
    # Operative (Position 1+)
    _action(
        C.OPERATIVE, "read_security_briefing", "Read Security Briefing",
        "Review filtered intelligence reports",
        base_chance=100, risk=RiskTier.MINIMAL,
        success=E(network=1),
    ),
    _action(
        C.OPERATIVE, "conduct_surveillance", "Conduct Surveillance",
        "Watch a target for suspicious activity",
        target=CHAR, max_target_rank=3, cooldown=1, execution=1,
        base_chance=85, risk=RiskTier.LOW,
        success=E(suspicion=5, evidence=10, network=2),
        failure=E(standing=-3),
    ),
    _action(
        C.OPERATIVE, "gather_informant_tips", "Gather Informant Tips",
        "Collect rumors and gossip from network",
        cooldown=1, base_chance=80, risk=RiskTier.MINIMAL,
        success=E(network=3),
    ),
    _action(
        C.OPERATIVE, "file_suspicious_activity", "File Suspicious Activity Report",
        "Report concerns to superiors",
        target=CHAR, max_target_rank=4, base_chance=100, risk=RiskTier.LOW,
        success=E(suspicion=10, standing=2),
    ),

    # Investigator (Position 2+)
    _action(
        C.INVESTIGATOR, "open_case_file", "Open Case File",
        "Start formal investigation on target",
        target=CHAR, max_target_rank=4, cooldown=2, base_chance=75, risk=RiskTier.LOW,
        success=E(suspicion=15, evidence=15, standing=3),
        failure=E(standing=-5),
    ),
    _action(
        C.INVESTIGATOR, "request_surveillance_warrant", "Request Surveillance Warrant",
        "Get approval for extended monitoring",
        target=CHAR, max_target_rank=4, cooldown=2, base_chance=70, risk=RiskTier.LOW,
        success=E(suspicion=5, network=3),
        failure=E(standing=-3),
    ),
    _action(
        C.INVESTIGATOR, "interview_associates", "Interview Associates",
        "Question target's colleagues",
        target=CHAR, max_target_rank=4, cooldown=1, base_chance=65, risk=RiskTier.MODERATE,
        success=E(evidence=20, reveals_loyalty=True),
        failure=E(standing=-5, exposure=5),
    ),
    _action(
        C.INVESTIGATOR, "search_personnel_records", "Search Personnel Records",
        "Check archives for irregularities",
        target=CHAR, max_target_rank=5, cooldown=1, base_chance=80, risk=RiskTier.LOW,
        success=E(evidence=15),
    ),

    # Case officer (Position 3+)
    _action(
        C.CASE_OFFICER, "launch_formal_investigation", "Launch Formal Investigation",
        "Full evidence gathering operation",
        target=CHAR, max_target_rank=4, approval_above=4, cooldown=3, execution=2,
        base_chance=60, risk=RiskTier.MODERATE,
        success=E(suspicion=25, evidence=30, standing=5),
        failure=E(standing=-10, exposure=10),
    ),
    _action(
        C.CASE_OFFICER, "authorize_communications_intercept", "Authorize Communications Intercept",
        "Tap phones, read mail",
        target=CHAR, max_target_rank=4, cooldown=2, execution=1,
        base_chance=70, risk=RiskTier.MODERATE,
        success=E(evidence=25, network=5),
        failure=E(standing=-5),
    ),
    _action(
        C.CASE_OFFICER, "recruit_informant", "Recruit Informant",
        "Turn someone into an asset",
        target=CHAR, max_target_rank=4, cooldown=3, base_chance=50, risk=RiskTier.HIGH,
        success=E(standing=5, network=10),
        failure=E(standing=-10, exposure=15),
    ),
    _action(
        C.CASE_OFFICER, "request_shuanggui", "Request Shuanggui Detention",
        "Submit detention request to superiors",
        target=CHAR, max_target_rank=4, approval_above=4, cooldown=3,
        base_chance=65, risk=RiskTier.HIGH,
        success=E(standing=5, elite_loyalty=5, starts_detention=True),
        failure=E(standing=-15),
    ),
    _action(
        C.CASE_OFFICER, "conduct_interrogation", "Conduct Interrogation",
        "Question detained subject",
        target=CHAR, cooldown=1, base_chance=60, risk=RiskTier.MODERATE,
        success=E(evidence=25, implicates_others=True),
        failure=E(standing=-5, international_standing=-2),
    ),

    # Directorate (Position 4+)
    _action(
        C.DIRECTORATE, "approve_mass_surveillance", "Approve Mass Surveillance",
        "Monitor entire faction or department",
        target=TargetKind.FACTION, cooldown=5, execution=2, base_chance=80, risk=RiskTier.MODERATE,
        success=E(network=15, stability=-3),
        failure=E(standing=-10, popular_support=-5),
    ),
    _action(
        C.DIRECTORATE, "order_shuanggui", "Order Shuanggui Detention",
        "Detain without further approval",
        target=CHAR, max_target_rank=4, cooldown=2, base_chance=100, risk=RiskTier.MODERATE,
        success=E(target_detained=True, elite_loyalty=10, starts_detention=True),
    ),
    _action(
        C.DIRECTORATE, "authorize_enhanced_interrogation", "Authorize Enhanced Interrogation",
        "Approve 'special measures'",
        target=CHAR, cooldown=2, base_chance=90, risk=RiskTier.HIGH,
        success=E(evidence=40, elite_loyalty=5, implicates_others=True),
        failure=E(popular_support=-5, international_standing=-10),
    ),
    _action(
        C.DIRECTORATE, "recommend_prosecution", "Recommend Prosecution",
        "Refer case to show trial",
        target=CHAR, cooldown=3, base_chance=75, risk=RiskTier.MODERATE,
        success=E(standing=10, starts_trial=True),
        failure=E(standing=-10),
    ),
    _action(
        C.DIRECTORATE, "dispatch_supervision_team", "Dispatch Supervision Team",
        "Send inspectors to lower levels",
        target=TargetKind.DEPARTMENT, cooldown=4, execution=2, base_chance=85, risk=RiskTier.LOW,
        success=E(evidence=20, network=10, stability=3),
        failure=E(standing=-5),
    ),
    _action(
        C.DIRECTORATE, "plant_evidence", "Plant Evidence",
        "Frame a target",
        target=CHAR, max_target_rank=5, cooldown=5, base_chance=40, risk=RiskTier.EXTREME,
        success=E(evidence=50, standing=5),
        failure=E(standing=-30, exposure=30),
    ),
    _action(
        C.DIRECTORATE, "dismiss_subordinate", "Dismiss Subordinate",
        "Remove an official from position",
        target=CHAR, max_target_rank=3, cooldown=2, base_chance=90, risk=RiskTier.MODERATE,
        success=E(target_dismissed=True, standing=3, elite_loyalty=5),
        failure=E(standing=-10),
    ),

    # Command (Position 5+)
    _action(
        C.COMMAND, "initiate_senior_investigation", "Initiate Senior Investigation",
        "Investigate Position 5-6 officials",
        target=CHAR, max_target_rank=6, approval_above=4, committee=True,
        cooldown=5, execution=3, base_chance=55, risk=RiskTier.HIGH,
        success=E(suspicion=30, evidence=35, standing=15, elite_loyalty=15),
        failure=E(standing=-20, exposure=20),
    ),
    _action(
        C.COMMAND, "prepare_show_trial", "Prepare Show Trial",
        "Begin formal trial proceedings",
        target=CHAR, committee=True, cooldown=5, execution=2, base_chance=70, risk=RiskTier.HIGH,
        success=E(standing=10, elite_loyalty=20, starts_trial=True),
        failure=E(standing=-15, international_standing=-5),
    ),
    _action(
        C.COMMAND, "issue_arrest_warrant", "Issue Arrest Warrant",
        "Immediate detention authority",
        target=CHAR, max_target_rank=5, cooldown=2, base_chance=100, risk=RiskTier.MODERATE,
        success=E(target_detained=True, elite_loyalty=10, starts_detention=True),
    ),
    _action(
        C.COMMAND, "launch_anti_corruption_campaign", "Launch Anti-Corruption Campaign",
        "Target sector or faction",
        target=TargetKind.FACTION, committee=True, decree=True, cooldown=10, execution=5,
        base_chance=75, risk=RiskTier.HIGH,
        success=E(standing=20, stability=-10, elite_loyalty=25, popular_support=10),
        failure=E(standing=-25, stability=-15),
    ),
    _action(
        C.COMMAND, "order_vertical_inspection", "Order Vertical Inspection",
        "Central team to provinces",
        target=TargetKind.SECTOR, decree=True, cooldown=6, execution=3,
        base_chance=85, risk=RiskTier.MODERATE,
        success=E(evidence=30, network=15, stability=5),
        failure=E(standing=-10),
    ),

    # Director (Position 7+)
    _action(
        C.DIRECTOR, "investigate_politburo_member", "Investigate Politburo Member",
        "Target highest officials",
        target=CHAR, max_target_rank=8, committee=True, cooldown=10, execution=5,
        base_chance=50, risk=RiskTier.EXTREME,
        success=E(suspicion=50, evidence=40, standing=30, elite_loyalty=30),
        failure=E(standing=-40, exposure=40),
    ),
    _action(
        C.DIRECTOR, "order_mass_detention", "Order Mass Detention",
        "Sweep arrests across sector",
        target=TargetKind.SECTOR, decree=True, cooldown=15, execution=2,
        base_chance=90, risk=RiskTier.EXTREME,
        success=E(stability=-20, elite_loyalty=40, popular_support=-15, international_standing=-15),
        failure=E(standing=-30, stability=-25),
    ),
    _action(
        C.DIRECTOR, "execute_without_trial", "Order Extrajudicial Elimination",
        "Target dies in 'accident'",
        target=CHAR, max_target_rank=6, decree=True, cooldown=10,
        base_chance=85, risk=RiskTier.EXTREME,
        success=E(target_executed=True, stability=-5, elite_loyalty=30, international_standing=-10),
        failure=E(standing=-40, popular_support=-20, international_standing=-20),
    ),
    _action(
        C.DIRECTOR, "control_security_apparatus", "Control Security Apparatus",
        "Direct all security operations",
        base_chance=100, risk=RiskTier.MINIMAL,
        success=E(standing=10, network=20, sets_flag=WorldFlag.CONTROLS_SECURITY_APPARATUS),
    ),
    _action(
        C.DIRECTOR, "fabricate_conspiracy", "Fabricate Conspiracy",
        "Manufacture case against faction",
        target=TargetKind.FACTION, committee=True, decree=True, cooldown=15, execution=5,
        base_chance=45, risk=RiskTier.EXTREME,
        success=E(standing=25, stability=-15, elite_loyalty=35),
        failure=E(standing=-50, exposure=50, stability=-20),
    ),
]
