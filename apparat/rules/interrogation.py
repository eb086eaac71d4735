"""
Detention and trial formulas.

Confession odds, confession types, implication, sentencing and the political
fallout of a trial. Functions that need randomness take a Dice; everything
else is deterministic.
"""

from ..state.schema import (
    Character,
    ConfessionType,
    Personality,
    TrialCharge,
    TrialSentence,
    clamp,
)
from ..tools.dice import Dice


# -----------------------------------------------------------------------------
# Balance tables
# -----------------------------------------------------------------------------

CHARGE_SEVERITY: dict[TrialCharge, int] = {
    TrialCharge.ESPIONAGE: 10,
    TrialCharge.COUNTER_REVOLUTIONARY: 10,
    TrialCharge.ECONOMIC_SABOTAGE: 8,
    TrialCharge.TROTSKYISM: 8,
    TrialCharge.BOURGEOIS_NATIONALISM: 6,
    TrialCharge.CORRUPTION: 5,
    TrialCharge.INCOMPETENCE: 3,
}

# Added to the severity score; cooperation earns leniency
CONFESSION_SEVERITY_MODIFIER: dict[ConfessionType, int] = {
    ConfessionType.COMPLIANT: -2,
    ConfessionType.RESISTED: 2,
    ConfessionType.RECANTED: 3,
    ConfessionType.IMPLICATED_OTHERS: -3,
}

# Upper bound of the severity score for each sentence, lenient first
SENTENCE_THRESHOLDS: list[tuple[int, TrialSentence]] = [
    (5, TrialSentence.DEMOTION),
    (10, TrialSentence.EXILE),
    (15, TrialSentence.IMPRISONMENT_10),
    (20, TrialSentence.IMPRISONMENT_15),
    (25, TrialSentence.IMPRISONMENT_25),
]

SENTENCE_INTIMIDATION: dict[TrialSentence, int] = {
    TrialSentence.EXECUTION: 30,
    TrialSentence.IMPRISONMENT_25: 20,
    TrialSentence.IMPRISONMENT_15: 15,
    TrialSentence.IMPRISONMENT_10: 10,
    TrialSentence.EXILE: 5,
    TrialSentence.DEMOTION: 2,
}

MAX_CONDEMNATION = 20
MAX_IMPLICATED = 3
SAME_FACTION_IMPLICATION_CHANCE = 40
OTHER_IMPLICATION_CHANCE = 15

EVIDENCE_GAIN_RANGE = (5, 15)


# -----------------------------------------------------------------------------
# Detention
# -----------------------------------------------------------------------------

def detention_confession_chance(personality: Personality, turns: int, evidence: int) -> int:
    """Per-turn chance a detainee confesses. Loyalty and paranoia resist, ambition helps."""
    chance = 30 + turns * 5 + evidence // 3
    chance -= personality.loyal // 3
    if personality.paranoid > 50:
        chance -= 10
    if personality.ambitious > 70:
        chance += 10
    return clamp(chance, 10, 90)


def draw_confession_type(personality: Personality, dice: Dice) -> ConfessionType:
    """What kind of confession a detainee gives once they break."""
    roll = dice.percentile()
    if personality.loyal > 80:
        # True believers resist or recant
        if roll <= 50:
            return ConfessionType.RESISTED
        if roll <= 70:
            return ConfessionType.RECANTED
        return ConfessionType.COMPLIANT
    if personality.ambitious > 70:
        # Ambitious detainees trade names for leniency
        if roll <= 60:
            return ConfessionType.IMPLICATED_OTHERS
        return ConfessionType.COMPLIANT
    if roll <= 25:
        return ConfessionType.RESISTED
    if roll <= 45:
        return ConfessionType.RECANTED
    if roll <= 75:
        return ConfessionType.COMPLIANT
    return ConfessionType.IMPLICATED_OTHERS


def draw_implicated(
    detainee: Character,
    candidates: list[Character],
    dice: Dice,
    limit: int = MAX_IMPLICATED,
) -> list[str]:
    """
    Names a detainee gives up.

    Same-faction associates are named far more often than strangers.
    Dead officials and the detainee themself are never named.
    """
    named: list[str] = []
    for other in candidates:
        if len(named) >= limit:
            break
        if other.id == detainee.id or not other.is_alive:
            continue
        same_faction = detainee.faction is not None and other.faction == detainee.faction
        odds = SAME_FACTION_IMPLICATION_CHANCE if same_faction else OTHER_IMPLICATION_CHANCE
        if dice.chance(odds):
            named.append(other.id)
    return named


def evidence_gain(dice: Dice) -> int:
    low, high = EVIDENCE_GAIN_RANGE
    return dice.between(low, high)


# -----------------------------------------------------------------------------
# Trial
# -----------------------------------------------------------------------------

def charges_from_evidence(evidence: int) -> list[TrialCharge]:
    """Charges a prosecutor can sustain on a given evidence file."""
    charges = [TrialCharge.CORRUPTION]
    if evidence >= 60:
        charges.append(TrialCharge.ECONOMIC_SABOTAGE)
    if evidence >= 85:
        charges.append(TrialCharge.COUNTER_REVOLUTIONARY)
    return charges


def trial_resistance(personality: Personality) -> int:
    """How hard a defendant is to break in the confession phase."""
    resistance = 30 + personality.loyal // 3 + (100 - personality.paranoid) // 4
    if personality.competent > 70:
        resistance -= 10
    if personality.ruthless > 60:
        resistance -= 15
    return clamp(resistance, 10, 90)


def extract_trial_confession(personality: Personality, dice: Dice) -> ConfessionType:
    """Roll against resistance; the margin decides how the defendant breaks."""
    resistance = trial_resistance(personality)
    roll = dice.percentile()
    if roll <= resistance:
        return ConfessionType.RESISTED

    margin = roll - resistance
    if margin > 40 and personality.ruthless > 50:
        return ConfessionType.IMPLICATED_OTHERS
    if margin > 20:
        return ConfessionType.COMPLIANT
    if roll < 80:
        return ConfessionType.RECANTED
    return ConfessionType.COMPLIANT


def severity_score(
    charges: list[TrialCharge],
    confession: ConfessionType | None,
    rank: int,
) -> int:
    score = sum(CHARGE_SEVERITY[c] for c in charges)
    if confession is not None:
        score += CONFESSION_SEVERITY_MODIFIER[confession]
    if rank >= 7:
        score += 4
    elif rank >= 5:
        score += 2
    return score


def sentence_for_score(score: int) -> TrialSentence:
    for ceiling, sentence in SENTENCE_THRESHOLDS:
        if score <= ceiling:
            return sentence
    return TrialSentence.EXECUTION


def sentence_weights(
    charges: list[TrialCharge],
    confession: ConfessionType | None,
    rank: int,
) -> dict[TrialSentence, int]:
    """
    Triangular weights centred on the sentence the severity score points to.

    Resisting or recanting pulls toward execution; naming others pulls
    toward demotion and exile.
    """
    ordered = list(TrialSentence)
    centre = ordered.index(sentence_for_score(severity_score(charges, confession, rank)))
    weights = {s: max(0, 6 - 3 * abs(i - centre)) for i, s in enumerate(ordered)}

    if confession in (ConfessionType.RESISTED, ConfessionType.RECANTED):
        weights[TrialSentence.EXECUTION] += 4
    elif confession == ConfessionType.IMPLICATED_OTHERS:
        weights[TrialSentence.DEMOTION] += 3
        weights[TrialSentence.EXILE] += 3
    return weights


def draw_sentence(
    charges: list[TrialCharge],
    confession: ConfessionType | None,
    rank: int,
    dice: Dice,
) -> TrialSentence:
    weights = sentence_weights(charges, confession, rank)
    sentences = list(weights)
    return dice.weighted(sentences, [weights[s] for s in sentences])


def international_condemnation(rank: int, charges: list[TrialCharge]) -> int:
    """Foreign outrage at a trial, fixed when charges are filed."""
    grave = sum(1 for c in charges if CHARGE_SEVERITY[c] >= 8)
    return min(MAX_CONDEMNATION, rank * 2 + grave * 3)


def intimidation_gained(sentence: TrialSentence, confession: ConfessionType | None) -> int:
    """How much the elite is cowed by the verdict."""
    value = SENTENCE_INTIMIDATION[sentence]
    if confession is not None and confession != ConfessionType.RESISTED:
        value += 10
    if confession == ConfessionType.IMPLICATED_OTHERS:
        value += 15
    return value


def creates_martyr(confession: ConfessionType | None) -> bool:
    return confession in (ConfessionType.RESISTED, ConfessionType.RECANTED)
