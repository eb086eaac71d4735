"""
State ministry actions.

Ministry risk tiers run routine..extreme and are harsher than the security
and diplomacy scale. Only actions that initiate a project run across turns;
everything else lands on the turn it is taken.
"""

from ..state.schema import Domain, EffectBundle as E, MinistryDepartment as D, TargetKind, Track
from .models import ActionDefinition, MinistryCategory as C, RiskTier, define

MINISTRY = TargetKind.MINISTRY
POLICY = TargetKind.POLICY
SECTOR = TargetKind.SECTOR
OFFICIAL = TargetKind.CHARACTER


def _action(category: C, id: str, name: str, description: str, **kwargs) -> ActionDefinition:
    kwargs.setdefault("track", Track.MINISTRY)
    return define(Domain.MINISTRY, category, id, name, description, **kwargs)


MINISTRY_ACTIONS: list[ActionDefinition] = [
    # Clerk (Position 1+)
    _action(
        C.CLERK, "process_documents", "Process Official Documents",
        "Handle routine administrative paperwork",
        department=D.GENERAL_OFFICE, cooldown=1, execution=1,
        base_chance=95, risk=RiskTier.ROUTINE,
        success=E(standing=1, network=1),
        failure=E(standing=-1),
    ),
    _action(
        C.CLERK, "compile_statistics", "Compile Ministry Statistics",
        "Gather and organize departmental data",
        target=MINISTRY, cooldown=2, execution=1, base_chance=85, risk=RiskTier.ROUTINE,
        success=E(standing=2, network=2),
        failure=E(standing=-1),
    ),
    _action(
        C.CLERK, "assist_inspection", "Assist Ministry Inspection",
        "Support official inspection teams",
        target=MINISTRY, department=D.AUDIT, cooldown=3, execution=1,
        base_chance=80, risk=RiskTier.MODERATE,
        success=E(standing=3, network=3),
        failure=E(standing=-2),
    ),

    # Officer (Position 2+)
    _action(
        C.OFFICER, "draft_regulations", "Draft Administrative Regulations",
        "Prepare regulatory documents",
        target=POLICY, cooldown=2, execution=1, base_chance=75, risk=RiskTier.MODERATE,
        success=E(stability=1, standing=3, network=2),
        failure=E(standing=-2),
    ),
    _action(
        C.OFFICER, "coordinate_departments", "Coordinate Between Departments",
        "Facilitate inter-departmental cooperation",
        target=MINISTRY, department=D.GENERAL_OFFICE, cooldown=2, execution=1,
        base_chance=70, risk=RiskTier.MODERATE,
        success=E(standing=4, network=5),
        failure=E(standing=-3, network=-2),
    ),
    _action(
        C.OFFICER, "prepare_budget_proposal", "Prepare Budget Proposal",
        "Draft departmental budget requests",
        target=MINISTRY, department=D.FINANCE, cooldown=4, execution=1,
        base_chance=65, risk=RiskTier.SIGNIFICANT,
        success=E(treasury=2, standing=5, patron_favor=2),
        failure=E(standing=-4, patron_favor=-2),
    ),

    # Director (Position 3+)
    _action(
        C.DIRECTOR, "implement_policy", "Implement State Council Policy",
        "Execute policies in your jurisdiction",
        target=POLICY, cooldown=3, execution=2, base_chance=65, risk=RiskTier.SIGNIFICANT,
        success=E(stability=3, popular_support=2, standing=6),
        failure=E(stability=-2, standing=-5),
    ),
    _action(
        C.DIRECTOR, "conduct_inspection", "Conduct Ministry Inspection",
        "Lead inspection of subordinate units",
        target=MINISTRY, department=D.AUDIT, cooldown=4, execution=1,
        base_chance=70, risk=RiskTier.SIGNIFICANT,
        success=E(stability=2, standing=5, network=4),
        failure=E(standing=-4),
    ),
    _action(
        C.DIRECTOR, "propose_administrative_reform", "Propose Administrative Reform",
        "Suggest improvements to ministry operations",
        target=MINISTRY, cooldown=5, execution=1, base_chance=55, risk=RiskTier.MAJOR,
        success=E(stability=2, standing=8, network=3, initiates_reform=True),
        failure=E(standing=-6, patron_favor=-3),
    ),
    _action(
        C.DIRECTOR, "allocate_resources", "Allocate Ministry Resources",
        "Distribute resources among departments",
        target=MINISTRY, department=D.FINANCE, cooldown=3, execution=1,
        base_chance=75, risk=RiskTier.MODERATE,
        success=E(treasury=1, standing=5, network=5),
        failure=E(standing=-3, network=-3),
    ),

    # Minister (Position 4+)
    _action(
        C.MINISTER, "direct_major_project", "Direct Major State Project",
        "Oversee implementation of major initiative",
        target=SECTOR, department=D.DEVELOPMENT_REFORM, cooldown=5, execution=3,
        base_chance=55, risk=RiskTier.MAJOR,
        success=E(stability=3, industrial_output=5, standing=10, initiates_project=True),
        failure=E(stability=-3, standing=-8),
    ),
    _action(
        C.MINISTER, "negotiate_budget", "Negotiate Ministry Budget",
        "Secure funding in budget negotiations",
        target=MINISTRY, department=D.FINANCE, cooldown=6, execution=1,
        base_chance=60, risk=RiskTier.SIGNIFICANT,
        success=E(treasury=5, standing=8, patron_favor=3),
        failure=E(treasury=-3, standing=-5),
    ),
    _action(
        C.MINISTER, "recommend_appointments", "Recommend Personnel Appointments",
        "Influence staffing decisions",
        target=OFFICIAL, department=D.HUMAN_RESOURCES, cooldown=4, execution=1,
        base_chance=65, risk=RiskTier.SIGNIFICANT,
        success=E(standing=6, network=8, disposition=20),
        failure=E(standing=-4, network=-3),
    ),
    _action(
        C.MINISTER, "initiate_audit", "Initiate Department Audit",
        "Order formal audit of subordinate units",
        target=MINISTRY, department=D.AUDIT, cooldown=5, execution=2,
        base_chance=70, risk=RiskTier.MAJOR,
        success=E(stability=2, standing=7, initiates_audit=True),
        failure=E(standing=-5, patron_favor=-2),
    ),

    # State councilor (Position 5+)
    _action(
        C.STATE_COUNCILOR, "propose_state_council_policy", "Propose State Council Policy",
        "Submit major policy proposal",
        target=POLICY, committee=True, cooldown=6, execution=2,
        base_chance=50, risk=RiskTier.MAJOR,
        success=E(stability=5, popular_support=3, standing=12),
        failure=E(standing=-8, patron_favor=-5),
    ),
    _action(
        C.STATE_COUNCILOR, "coordinate_commission_work", "Coordinate Commission Work",
        "Lead cross-ministry coordination",
        target=SECTOR, department=D.DEVELOPMENT_REFORM, cooldown=4, execution=1,
        base_chance=65, risk=RiskTier.SIGNIFICANT,
        success=E(stability=3, standing=10, network=8),
        failure=E(stability=-2, standing=-6),
    ),
    _action(
        C.STATE_COUNCILOR, "issue_ministry_directive", "Issue Ministry Directive",
        "Issue binding orders to subordinate units",
        target=MINISTRY, decree=True, cooldown=3, execution=1,
        base_chance=80, risk=RiskTier.MODERATE,
        success=E(stability=2, standing=8),
        failure=E(stability=-2, standing=-4),
    ),
    _action(
        C.STATE_COUNCILOR, "present_state_council_report", "Present to State Council",
        "Report directly to State Council meeting",
        department=D.GENERAL_OFFICE, cooldown=6, execution=1,
        base_chance=60, risk=RiskTier.MAJOR,
        success=E(standing=12, patron_favor=5),
        failure=E(standing=-8, patron_favor=-4),
    ),

    # Premier (Position 7+)
    _action(
        C.PREMIER, "chair_executive_meeting", "Chair State Council Executive Meeting",
        "Lead State Council executive session",
        department=D.GENERAL_OFFICE, decree=True, cooldown=3, execution=1,
        base_chance=85, risk=RiskTier.MODERATE,
        success=E(stability=5, standing=15),
        failure=E(stability=-3, standing=-5),
    ),
    _action(
        C.PREMIER, "issue_state_council_decree", "Issue State Council Decree",
        "Promulgate binding administrative decree",
        target=POLICY, committee=True, decree=True, cooldown=5, execution=1,
        base_chance=80, risk=RiskTier.MAJOR,
        success=E(stability=5, popular_support=5, standing=15),
        failure=E(stability=-5, standing=-10),
    ),
    _action(
        C.PREMIER, "reorganize_ministry", "Reorganize Ministry Structure",
        "Restructure ministry organization",
        target=MINISTRY, committee=True, decree=True, cooldown=8, execution=3,
        base_chance=65, risk=RiskTier.EXTREME,
        success=E(stability=-5, standing=20, network=10, initiates_reform=True),
        failure=E(stability=-8, standing=-15),
    ),
    _action(
        C.PREMIER, "launch_national_campaign", "Launch National Administrative Campaign",
        "Initiate nationwide government campaign",
        target=SECTOR, committee=True, decree=True, cooldown=10, execution=4,
        base_chance=55, risk=RiskTier.EXTREME,
        success=E(stability=8, popular_support=10, industrial_output=8, standing=20),
        failure=E(stability=-10, popular_support=-8, standing=-15),
    ),
]
