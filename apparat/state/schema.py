"""
Pydantic models for APPARAT world state.

All state is versioned for migration support.
Every engine collection (cooldowns, pending actions, detentions, trials,
projects) is a typed field on World, so a save file round-trips as plain JSON.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


SCHEMA_VERSION = "2.0.0"

# Detention is resolved by force after this many turns (~6 months)
MAX_DETENTION_TURNS = 12

# Only the most recent NPC actions are kept on the world
NPC_LOG_LIMIT = 50


def generate_id() -> str:
    return str(uuid4())[:8]


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    """Clamp a counter into its legal range."""
    return max(low, min(high, value))


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Domain(str, Enum):
    SECURITY = "security"
    DIPLOMACY = "diplomacy"
    MINISTRY = "ministry"


class Track(str, Enum):
    """Career lane. Gates domain-specific actions below top leadership."""
    SECURITY = "security"
    DIPLOMACY = "diplomacy"
    MINISTRY = "ministry"
    PARTY = "party"
    MILITARY = "military"
    ECONOMIC = "economic"

    @property
    def label(self) -> str:
        return {
            Track.SECURITY: "Security Services",
            Track.DIPLOMACY: "Foreign Affairs",
            Track.MINISTRY: "State Ministry",
            Track.PARTY: "Party Apparatus",
            Track.MILITARY: "Military",
            Track.ECONOMIC: "Economic Planning",
        }[self]


class TargetKind(str, Enum):
    NONE = "none"
    CHARACTER = "character"
    FACTION = "faction"
    DEPARTMENT = "department"
    SECTOR = "sector"
    COUNTRY = "country"
    TREATY = "treaty"
    MINISTRY = "ministry"
    POLICY = "policy"


class WorldFlag(str, Enum):
    """Closed set of world flags. Anything else is a typo."""
    CONTROLS_SECURITY_APPARATUS = "controls_bps"
    SANCTIONS_ACTIVE = "sanctions_active"
    MILITARY_INTERVENTION = "military_intervention"
    NUCLEAR_ALERT = "nuclear_alert"
    EMERGENCY_POWERS_ACTIVE = "emergency_powers_active"
    REFORM_UNDERWAY = "reform_underway"
    AUDIT_UNDERWAY = "audit_underway"


class CharacterStatus(str, Enum):
    ACTIVE = "active"
    UNDER_INVESTIGATION = "under_investigation"
    DETAINED = "detained"
    IMPRISONED = "imprisoned"
    EXILED = "exiled"
    EXPELLED = "expelled"
    EXECUTED = "executed"


class NPCGoal(str, Enum):
    ROOT_OUT_TRAITORS = "root_out_traitors"
    PURGE_ENEMIES = "purge_enemies"
    PROTECT_POSITION = "protect_position"


class PoliticalBloc(str, Enum):
    SOCIALIST = "socialist"
    CAPITALIST = "capitalist"
    NON_ALIGNED = "non_aligned"


class TreatyType(str, Enum):
    TRADE_AGREEMENT = "trade_agreement"
    MUTUAL_DEFENSE = "mutual_defense"
    AID_PACKAGE = "aid_package"


class MinistryDepartment(str, Enum):
    GENERAL_OFFICE = "general_office"
    DEVELOPMENT_REFORM = "development_reform"
    FINANCE = "finance"
    INDUSTRY = "industry"
    CIVIL_AFFAIRS = "civil_affairs"
    JUSTICE = "justice"
    HUMAN_RESOURCES = "human_resources"
    NATURAL_RESOURCES = "natural_resources"
    HOUSING = "housing"
    TRANSPORT = "transport"
    AGRICULTURE = "agriculture"
    COMMERCE = "commerce"
    CULTURE = "culture"
    HEALTH = "health"
    AUDIT = "audit"

    @property
    def is_commission(self) -> bool:
        """Commissions outrank ordinary ministries."""
        return self in (MinistryDepartment.DEVELOPMENT_REFORM, MinistryDepartment.HEALTH)


class RecordStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class DetentionPhase(str, Enum):
    ISOLATION = "isolation"
    INTERROGATION = "interrogation"
    CONFESSION = "confession"
    DOCUMENTATION = "documentation"
    REFERRAL = "referral"

    @property
    def index(self) -> int:
        return list(DetentionPhase).index(self)


class DetentionLocation(str, Enum):
    GUEST_HOUSE = "guest_house"
    TRAINING_CENTER = "training_center"
    SANITARIUM = "sanitarium"
    HOTEL_ANNEX = "hotel_annex"
    UNDISCLOSED = "undisclosed"


class DetentionOutcome(str, Enum):
    CLEARED = "cleared"
    WARNED = "warned"
    DEMOTED = "demoted"
    EXPELLED = "expelled"
    REFERRED_TO_TRIAL = "referred_to_trial"
    DIED_IN_DETENTION = "died_in_detention"
    IMPRISONED = "imprisoned"


class ConfessionType(str, Enum):
    COMPLIANT = "compliant"              # Read the prepared statement
    RESISTED = "resisted"
    RECANTED = "recanted"                # Confessed, then withdrew it
    IMPLICATED_OTHERS = "implicated_others"


class TrialPhase(str, Enum):
    ACCUSATION = "accusation"
    CONFESSION_EXTRACTION = "confession_extraction"
    PUBLIC_TRIAL = "public_trial"
    SENTENCING = "sentencing"
    COMPLETED = "completed"

    @property
    def index(self) -> int:
        return list(TrialPhase).index(self)


class TrialCharge(str, Enum):
    ECONOMIC_SABOTAGE = "economic_sabotage"
    ESPIONAGE = "espionage"
    COUNTER_REVOLUTIONARY = "counter_revolutionary"
    TROTSKYISM = "trotskyism"
    BOURGEOIS_NATIONALISM = "bourgeois_nationalism"
    CORRUPTION = "corruption"
    INCOMPETENCE = "incompetence"


class TrialSentence(str, Enum):
    # Ordered lenient -> harsh; the sentencing draw relies on this order
    DEMOTION = "demotion"
    EXILE = "exile"
    IMPRISONMENT_10 = "imprisonment_10"
    IMPRISONMENT_15 = "imprisonment_15"
    IMPRISONMENT_25 = "imprisonment_25"
    EXECUTION = "execution"


class ProjectPhase(str, Enum):
    PLANNING = "planning"
    IMPLEMENTATION = "implementation"
    EXECUTION = "execution"
    COMPLETION = "completion"
    COMPLETED = "completed"
    FAILED = "failed"


# -----------------------------------------------------------------------------
# Effects
# -----------------------------------------------------------------------------

class EffectBundle(BaseModel):
    """
    Sparse set of signed deltas and triggers applied when an outcome lands.

    Every delta is applied exactly once, with its sign as written:
    a treasury of -5 spends five, a disposition of -10 lowers it by ten.
    """
    model_config = ConfigDict(frozen=True)

    # World counters
    stability: int = 0
    treasury: int = 0
    popular_support: int = 0
    elite_loyalty: int = 0
    international_standing: int = 0
    industrial_output: int = 0

    # Acting official
    standing: int = 0
    network: int = 0
    patron_favor: int = 0
    exposure: int = 0            # Corruption risk: how exposed the actor becomes

    # Character target
    suspicion: int = 0
    evidence: int = 0
    disposition: int = 0
    fear: int = 0

    # Country target
    relationship: int = 0
    bloc_relationship: int = 0
    tension: int = 0
    intelligence: int = 0
    counter_intel: int = 0

    sets_flag: WorldFlag | None = None
    clears_flag: WorldFlag | None = None

    # Triggers
    starts_detention: bool = False
    target_detained: bool = False
    starts_trial: bool = False
    target_dismissed: bool = False
    target_demoted: bool = False
    target_executed: bool = False
    implicates_others: bool = False
    reveals_loyalty: bool = False
    initiates_project: bool = False
    initiates_reform: bool = False
    initiates_audit: bool = False
    treaty: TreatyType | None = None

    @property
    def resource_cost(self) -> int:
        """Treasury spent up front by this bundle."""
        return max(0, -self.treasury)

    @property
    def detains_target(self) -> bool:
        return self.starts_detention or self.target_detained

    def changes(self) -> dict:
        """Only the fields that differ from the empty bundle."""
        return self.model_dump(exclude_defaults=True, mode="json")

    def is_empty(self) -> bool:
        return not self.changes()


# -----------------------------------------------------------------------------
# Actors
# -----------------------------------------------------------------------------

class Personality(BaseModel):
    """Traits on a 0-100 scale."""
    loyal: int = 50
    paranoid: int = 50
    ambitious: int = 50
    competent: int = 50
    ruthless: int = 50


class Player(BaseModel):
    """The player's official. Rank 0 is outside the hierarchy, 8 is the top."""
    name: str = "Comrade"
    title: str = "Junior Official"
    rank: int = 1
    track: Track = Track.SECURITY
    standing: int = 50
    network: int = 20
    patron_favor: int = 50
    exposure: int = 0


class Character(BaseModel):
    """A non-player official."""
    id: str = Field(default_factory=generate_id)
    name: str
    title: str | None = None
    rank: int | None = 1  # None = position vacated
    track: Track | None = None
    faction: str | None = None
    status: CharacterStatus = CharacterStatus.ACTIVE
    is_detained: bool = False
    personality: Personality = Field(default_factory=Personality)
    disposition: int = 0  # -100 to 100, toward the player
    fear: int = 0
    suspicion: int = 0
    evidence: int = 0
    goals: list[NPCGoal] = Field(default_factory=list)
    loyalty_known: bool = False

    @property
    def is_alive(self) -> bool:
        return self.status != CharacterStatus.EXECUTED

    @property
    def is_free(self) -> bool:
        """Alive, at liberty and still inside the apparatus."""
        return self.is_alive and not self.is_detained and self.status in (
            CharacterStatus.ACTIVE,
            CharacterStatus.UNDER_INVESTIGATION,
        )

    @property
    def position(self) -> int:
        return self.rank or 0


class Country(BaseModel):
    id: str
    name: str
    bloc: PoliticalBloc = PoliticalBloc.NON_ALIGNED
    relationship: int = 0  # -100 to 100
    tension: int = 20
    military_strength: int = 50
    intelligence_assets: int = 10
    espionage_activity: int = 10
    treaties: list[TreatyType] = Field(default_factory=list)

    def modify_relationship(self, delta: int) -> int:
        self.relationship = clamp(self.relationship + delta, -100, 100)
        return self.relationship


class WorldStats(BaseModel):
    """National counters, all 0-100."""
    stability: int = 50
    treasury: int = 50
    popular_support: int = 50
    elite_loyalty: int = 50
    international_standing: int = 50
    industrial_output: int = 50

    def apply(self, stat: str, delta: int) -> int:
        """Apply a signed delta to one counter, clamped. Returns the new value."""
        value = clamp(getattr(self, stat) + delta)
        setattr(self, stat, value)
        return value


# -----------------------------------------------------------------------------
# Engine records
# -----------------------------------------------------------------------------

class CooldownTracker(BaseModel):
    """
    Action id -> first turn on which the action is usable again.

    An action absent from the map is always usable.
    """
    cooldowns: dict[str, int] = Field(default_factory=dict)

    def set_cooldown(self, action_id: str, current_turn: int, cooldown_turns: int) -> int:
        available = current_turn + max(0, cooldown_turns)
        self.cooldowns[action_id] = available
        return available

    def is_on_cooldown(self, action_id: str, current_turn: int) -> bool:
        available = self.cooldowns.get(action_id)
        if available is None:
            return False
        return current_turn < available

    def turns_remaining(self, action_id: str, current_turn: int) -> int:
        available = self.cooldowns.get(action_id)
        if available is None:
            return 0
        return max(0, available - current_turn)

    def clear_expired(self, current_turn: int) -> int:
        """Drop entries that are usable again. Returns how many were dropped."""
        before = len(self.cooldowns)
        self.cooldowns = {k: v for k, v in self.cooldowns.items() if v > current_turn}
        return before - len(self.cooldowns)


class PendingAction(BaseModel):
    """A multi-turn action waiting for its completion turn."""
    id: str = Field(default_factory=generate_id)
    domain: Domain
    action_id: str
    target_id: str | None = None
    initiated_turn: int
    completion_turn: int
    initiator: str = "player"  # "player" or an NPC id
    status: RecordStatus = RecordStatus.IN_PROGRESS
    success_chance: int = 0  # Estimate at initiation; recomputed on resolution

    # Filled in exactly once, on resolution
    resolved_turn: int | None = None
    succeeded: bool | None = None
    roll: int | None = None
    result_description: str | None = None
    effects_applied: EffectBundle | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == RecordStatus.IN_PROGRESS

    def is_due(self, turn: int) -> bool:
        return self.is_pending and self.completion_turn <= turn


class Detention(BaseModel):
    """A coercive detention, advanced once per turn until an outcome is set."""
    id: str = Field(default_factory=generate_id)
    target_id: str
    target_name: str
    target_rank: int = 0
    initiated_by: str = "player"
    initiated_turn: int
    phase: DetentionPhase = DetentionPhase.ISOLATION
    turns_in_detention: int = 0
    last_advanced_turn: int = 0
    evidence: int = 0
    confession_obtained: bool = False
    confession_type: ConfessionType | None = None
    implicated_ids: list[str] = Field(default_factory=list)
    location: DetentionLocation = DetentionLocation.GUEST_HOUSE
    protectors: int = 6  # Guards on rotation
    outcome: DetentionOutcome | None = None
    referred_to_trial: bool = False
    ended_turn: int | None = None

    @property
    def is_active(self) -> bool:
        return self.outcome is None

    @property
    def is_overdue(self) -> bool:
        return self.turns_in_detention > MAX_DETENTION_TURNS


class Trial(BaseModel):
    """A show trial. Immutable once completed."""
    id: str = Field(default_factory=generate_id)
    defendant_id: str
    defendant_name: str
    defendant_rank: int = 0
    charges: list[TrialCharge] = Field(default_factory=list)
    initiated_turn: int
    phase: TrialPhase = TrialPhase.ACCUSATION
    phase_entered_turn: int = 0
    confession_obtained: bool = False
    confession_type: ConfessionType | None = None
    sentence: TrialSentence | None = None
    intimidation_gained: int = 0
    martyr_created: bool = False
    international_condemnation: int = 0
    completed_turn: int | None = None
    source_detention_id: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.phase == TrialPhase.COMPLETED


class Project(BaseModel):
    """A multi-turn ministry project."""
    id: str = Field(default_factory=generate_id)
    action_id: str
    name: str
    department: MinistryDepartment = MinistryDepartment.GENERAL_OFFICE
    target: str | None = None
    initiated_turn: int
    completion_turn: int
    success_chance: int  # Snapshotted at initiation
    phase: ProjectPhase = ProjectPhase.PLANNING
    progress: int = 0
    initiator: str = "player"

    @property
    def duration(self) -> int:
        return max(1, self.completion_turn - self.initiated_turn)

    @property
    def is_finished(self) -> bool:
        return self.phase in (ProjectPhase.COMPLETED, ProjectPhase.FAILED)


class NPCActionEvent(BaseModel):
    """What an NPC did on a given turn."""
    id: str = Field(default_factory=generate_id)
    turn: int
    domain: Domain
    character_id: str
    character_name: str
    action_id: str
    target_id: str | None = None
    succeeded: bool | None = None  # None = scheduled, not yet resolved
    description: str = ""


class DomainLedger(BaseModel):
    """Per-domain cooldowns and in-flight actions."""
    cooldowns: CooldownTracker = Field(default_factory=CooldownTracker)
    npc_cooldowns: dict[str, CooldownTracker] = Field(default_factory=dict)
    pending: list[PendingAction] = Field(default_factory=list)

    def tracker_for(self, actor_id: str) -> CooldownTracker:
        if actor_id == "player":
            return self.cooldowns
        if actor_id not in self.npc_cooldowns:
            self.npc_cooldowns[actor_id] = CooldownTracker()
        return self.npc_cooldowns[actor_id]

    def active_pending(self) -> list[PendingAction]:
        return [p for p in self.pending if p.is_pending]

    def has_unresolved(self, actor_id: str, action_id: str) -> bool:
        return any(
            p.is_pending and p.initiator == actor_id and p.action_id == action_id
            for p in self.pending
        )

    def clear_expired(self, current_turn: int) -> int:
        dropped = self.cooldowns.clear_expired(current_turn)
        for tracker in self.npc_cooldowns.values():
            dropped += tracker.clear_expired(current_turn)
        self.npc_cooldowns = {k: v for k, v in self.npc_cooldowns.items() if v.cooldowns}
        return dropped


# -----------------------------------------------------------------------------
# World aggregate
# -----------------------------------------------------------------------------

class World(BaseModel):
    """
    The single mutable aggregate: actors, counters and every engine record.

    The engine has one logical writer per world. Nothing here is thread-safe.
    """
    schema_version: str = SCHEMA_VERSION
    id: str = Field(default_factory=generate_id)
    name: str = "Unnamed"
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    seed: int | None = None

    turn: int = 1
    last_advanced_turn: int = 0

    player: Player = Field(default_factory=Player)
    characters: list[Character] = Field(default_factory=list)
    countries: list[Country] = Field(default_factory=list)
    stats: WorldStats = Field(default_factory=WorldStats)
    flags: set[WorldFlag] = Field(default_factory=set)

    security: DomainLedger = Field(default_factory=DomainLedger)
    diplomacy: DomainLedger = Field(default_factory=DomainLedger)
    ministry: DomainLedger = Field(default_factory=DomainLedger)

    detentions: list[Detention] = Field(default_factory=list)
    detention_archive: list[Detention] = Field(default_factory=list)
    trials: list[Trial] = Field(default_factory=list)
    trial_archive: list[Trial] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)

    npc_log: list[NPCActionEvent] = Field(default_factory=list)

    def ledger(self, domain: Domain) -> DomainLedger:
        return {
            Domain.SECURITY: self.security,
            Domain.DIPLOMACY: self.diplomacy,
            Domain.MINISTRY: self.ministry,
        }[domain]

    def character(self, character_id: str | None) -> Character | None:
        if character_id is None:
            return None
        for char in self.characters:
            if char.id == character_id:
                return char
        return None

    def country(self, country_id: str | None) -> Country | None:
        if country_id is None:
            return None
        for country in self.countries:
            if country.id == country_id:
                return country
        return None

    def has_flag(self, flag: WorldFlag) -> bool:
        return flag in self.flags

    def set_flag(self, flag: WorldFlag) -> None:
        self.flags.add(flag)

    def clear_flag(self, flag: WorldFlag) -> None:
        self.flags.discard(flag)

    def active_detention_for(self, target_id: str) -> Detention | None:
        for detention in self.detentions:
            if detention.target_id == target_id and detention.is_active:
                return detention
        return None

    def active_trial_for(self, defendant_id: str) -> Trial | None:
        for trial in self.trials:
            if trial.defendant_id == defendant_id and not trial.is_completed:
                return trial
        return None

    def log_npc_action(self, event: NPCActionEvent) -> None:
        self.npc_log.append(event)
        if len(self.npc_log) > NPC_LOG_LIMIT:
            self.npc_log = self.npc_log[-NPC_LOG_LIMIT:]

    def touch(self) -> None:
        self.updated_at = datetime.now()
