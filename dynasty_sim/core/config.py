"""All tunable constants for the lifecycle and succession engine.

Every magic number in the codebase must reference this file.
"""

# =============================================================================
# TIME
# =============================================================================
TICKS_PER_YEAR: int = 12
MONTH_NAMES: list[str] = [
    "Deepwinter", "Thaw", "Seedtime", "Rains", "Bloom", "Highsun",
    "Harvest", "Reaping", "Leafall", "Mists", "Frost", "Longnight",
]

# =============================================================================
# LIFE STAGES
# =============================================================================
CHILD_MATURITY_AGE: int = 16
ELDER_AGE: int = 60
ELDER_WISDOM_BONUS: int = 10

# Natural mortality (annual hazards, applied per tick as annual / TICKS_PER_YEAR)
OLD_AGE_ONSET: int = 50
OLD_AGE_RATE_PER_YEAR: float = 0.005
LATE_AGE_ONSET: int = 70
LATE_AGE_RATE_PER_YEAR: float = 0.01
VERY_OLD_AGE: int = 85
VERY_OLD_AGE_HAZARD: float = 0.15
OLD_AGE_CAUSES: list[str] = [
    "natural causes", "illness", "old age", "fever",
    "mysterious illness", "in their sleep",
]

# =============================================================================
# ROLES
# =============================================================================
ROLES: list[str] = [
    "ruler", "heir", "general", "advisor", "rival", "rebel_leader",
    "commoner", "merchant", "scholar", "warrior", "priest",
]
OFFICE_ROLES: set[str] = {"ruler", "heir", "general", "advisor", "rival", "rebel_leader", "priest"}

# Age range (years, inclusive) for freshly created characters
ROLE_AGE_RANGES: dict[str, tuple[int, int]] = {
    "ruler": (30, 59),
    "heir": (15, 29),
    "general": (35, 54),
    "advisor": (40, 64),
    "rival": (25, 49),
    "rebel_leader": (25, 44),
    "commoner": (18, 49),
    "merchant": (18, 49),
    "scholar": (18, 49),
    "warrior": (18, 49),
    "priest": (30, 59),
}

ROLE_TITLES: dict[str, list[str]] = {
    "ruler": ["King", "Queen", "Chief", "High Chief", "Emperor", "Empress", "Supreme Leader"],
    "heir": ["Crown Prince", "Crown Princess", "Heir Apparent", "Prince", "Princess"],
    "general": ["General", "War Chief", "Marshal", "Commander", "Warlord"],
    "advisor": ["High Advisor", "Chancellor", "Vizier", "Sage", "Oracle", "Minister"],
    "rival": ["Lord", "Lady", "Duke", "Duchess", "Count", "Countess"],
    "rebel_leader": ["Rebel Leader", "Revolutionary", "Insurgent Chief", "Freedom Fighter"],
    "commoner": ["Goodman", "Goodwife"],
    "merchant": ["Merchant", "Trader"],
    "scholar": ["Scholar", "Scribe"],
    "warrior": ["Warrior", "Shieldbearer"],
    "priest": ["High Priest", "High Priestess", "Priest", "Priestess"],
}

ROLE_SOCIAL_CLASS: dict[str, str] = {
    "ruler": "noble",
    "heir": "noble",
    "rival": "noble",
    "general": "noble",
    "advisor": "noble",
    "rebel_leader": "commoner",
    "commoner": "commoner",
    "warrior": "commoner",
    "merchant": "merchant",
    "scholar": "clergy",
    "priest": "clergy",
}

DYNASTY_EPITHETS: list[str] = [
    "the Great", "the Wise", "the Bold", "the Cruel", "the Cunning", "the Just",
    "the Merciless", "the Peaceful", "the Conqueror", "the Builder", "the Pious",
    "the Magnificent", "the Terrible", "the Fearless", "the Shrewd",
]

# =============================================================================
# TRAITS (0-100 scale)
# =============================================================================
TRAIT_MIN: int = 0
TRAIT_MAX: int = 100

TRAIT_NAMES: list[str] = [
    "ambition", "greed", "loyalty", "honor", "cruelty", "compassion",
    "justice", "generosity", "cunning", "wisdom", "paranoia", "vigilance",
    "courage", "pride", "wrath", "charisma", "diplomacy", "strength",
]

TRAIT_BASELINE_RANGE: tuple[int, int] = (20, 80)
# Volatility traits draw from narrower, lower ranges
TRAIT_VOLATILE_RANGES: dict[str, tuple[int, int]] = {
    "cruelty": (10, 60),
    "paranoia": (10, 50),
    "wrath": (10, 50),
}

ROLE_TRAIT_BONUSES: dict[str, dict[str, int]] = {
    "ruler": {"ambition": 20, "charisma": 15, "justice": 10, "vigilance": 10},
    "heir": {"pride": 15},
    "general": {"courage": 25, "wrath": 15, "strength": 10},
    "advisor": {"wisdom": 20, "cunning": 15},
    "rival": {"ambition": 30, "loyalty": -20},
    "rebel_leader": {"courage": 20, "loyalty": -30, "ambition": 25},
    "commoner": {},
    "merchant": {"greed": 15, "diplomacy": 10},
    "scholar": {"wisdom": 15, "cunning": 5},
    "warrior": {"strength": 20, "courage": 15},
    "priest": {"compassion": 10, "wisdom": 10, "honor": 10},
}

INHERITANCE_NOISE: int = 10

TRAIT_DESCRIPTION_LOW: int = 35
TRAIT_DESCRIPTION_HIGH: int = 65

# =============================================================================
# EMOTIONS (0-100 scale)
# =============================================================================
EMOTION_NAMES: list[str] = ["hope", "fear", "shame", "despair", "contentment", "rage"]
EMOTION_INITIAL_RANGES: dict[str, tuple[int, int]] = {
    "hope": (40, 70),
    "fear": (10, 40),
    "shame": (0, 20),
    "despair": (0, 20),
    "contentment": (40, 70),
    "rage": (0, 30),
}

# =============================================================================
# SECRET GOALS
# =============================================================================
SECRET_GOALS: list[str] = [
    "seize_throne", "accumulate_wealth", "revenge", "protect_family",
    "foreign_allegiance", "religious_dominance", "independence", "glory", "none",
]
SECRET_GOAL_FALLBACKS: list[str] = [
    "accumulate_wealth", "protect_family", "glory", "independence", "none",
]

# =============================================================================
# SKILLS (0-100 scale)
# =============================================================================
SKILL_NAMES: list[str] = [
    "leadership", "combat", "diplomacy", "stewardship", "scholarship",
    "medicine", "theology", "trade", "farming", "crafting",
]

SOCIAL_CLASS_SKILL_BASELINE: dict[str, dict[str, float]] = {
    "noble": {
        "leadership": 25, "combat": 20, "diplomacy": 25, "stewardship": 20, "scholarship": 15,
        "medicine": 5, "theology": 10, "trade": 10, "farming": 5, "crafting": 5,
    },
    "clergy": {
        "leadership": 10, "combat": 5, "diplomacy": 15, "stewardship": 10, "scholarship": 25,
        "medicine": 20, "theology": 30, "trade": 5, "farming": 10, "crafting": 10,
    },
    "merchant": {
        "leadership": 10, "combat": 5, "diplomacy": 20, "stewardship": 20, "scholarship": 10,
        "medicine": 5, "theology": 5, "trade": 30, "farming": 5, "crafting": 15,
    },
    "commoner": {
        "leadership": 5, "combat": 15, "diplomacy": 5, "stewardship": 5, "scholarship": 5,
        "medicine": 10, "theology": 5, "trade": 10, "farming": 30, "crafting": 25,
    },
}

SKILL_SOCIETY_SHARE: float = 0.10    # cultural knowledge from society averages
SKILL_PARENT_SHARE: float = 0.25     # knowledge passed down by known parents
SKILL_INHERITANCE_CEILING: float = 30.0
SKILL_INHERITANCE_CEILING_WITH_PARENTS: float = 40.0
SKILL_NOISE: int = 5
SKILL_ELDER_RETENTION: float = 0.9   # elders lose a little of their baseline

# =============================================================================
# PRIORITIES
# =============================================================================
FOOD_SECURITY_THRESHOLD: float = 30.0
MILITARY_SAFETY_THRESHOLD: float = 20.0

# =============================================================================
# WOUNDS & MEDICATION
# =============================================================================
WOUND_SEVERITY_MAX: float = 100.0
HEALING_COMPLETE: float = 100.0
CRITICAL_WOUND_THRESHOLD: float = 95.0
CRITICAL_WOUND_DEATH_CHANCE: float = 0.30

UNTREATED_WINDOW_TICKS: int = 6
UNTREATED_SEVERITY_THRESHOLD: float = 60.0
UNTREATED_MIN_TICKS_WOUNDED: int = 12
UNTREATED_DEATH_CHANCE: float = 0.05

MEDICATION_EFFECTIVENESS_NOISE: float = 0.20   # +/- 20% of base effectiveness

# type -> effectiveness, risk of death, risk of side effects, healing per tick, side effects
MEDICATIONS: dict[str, dict] = {
    "herbal": {
        "effectiveness": 0.6,
        "risk_of_death": 0.02,
        "risk_of_side_effects": 0.10,
        "healing_per_tick": 15.0,
        "side_effects": ["nausea", "drowsiness", "rash"],
    },
    "surgical": {
        "effectiveness": 0.8,
        "risk_of_death": 0.08,
        "risk_of_side_effects": 0.20,
        "healing_per_tick": 20.0,
        "side_effects": ["infection", "scarring", "lingering pain", "limp"],
    },
    "experimental": {
        "effectiveness": 0.9,
        "risk_of_death": 0.15,
        "risk_of_side_effects": 0.35,
        "healing_per_tick": 25.0,
        "side_effects": ["fever dreams", "tremors", "memory loss", "madness", "blindness"],
    },
    "spiritual": {
        "effectiveness": 0.3,
        "risk_of_death": 0.0,
        "risk_of_side_effects": 0.05,
        "healing_per_tick": 8.0,
        "side_effects": ["religious fervor", "visions"],
    },
    "rest": {
        "effectiveness": 0.5,
        "risk_of_death": 0.0,
        "risk_of_side_effects": 0.0,
        "healing_per_tick": 5.0,
        "side_effects": [],
    },
}
PASSIVE_HEALING_TYPE: str = "rest"
TREATMENT_DEATH_CAUSE: str = "complications from treatment"
UNTREATED_WOUND_DEATH_CAUSE: str = "succumbed to untreated wounds"
CRITICAL_WOUND_DEATH_CAUSE: str = "mortal wounds"

# =============================================================================
# MORTALITY CATALOG
# =============================================================================
ACCIDENT_BASE_FATALITY: dict[str, float] = {
    "hunting": 0.15,
    "construction": 0.10,
    "travel": 0.08,
    "tournament": 0.12,
    "fire": 0.20,
}
ACCIDENT_WOUND_CHANCE: float = 0.30
ACCIDENT_WOUND_SEVERITY: tuple[int, int] = (20, 50)

DISEASE_BASE_MORTALITY: dict[str, float] = {
    "plague": 0.40,
    "fever": 0.15,
    "consumption": 0.25,
    "dysentery": 0.12,
    "pox": 0.20,
}
# (upper age bound exclusive, extra mortality), checked in order
DISEASE_AGE_BANDS: list[tuple[int, float]] = [
    (5, 0.15),
    (16, 0.05),
    (60, 0.0),
    (75, 0.15),
    (10_000, 0.25),
]

POISON_DETECTION_DIVISOR: float = 200.0
POISON_DETECTION_CAP: float = 0.50
POISON_LETHALITY_RANGE: tuple[float, float] = (0.50, 0.80)
POISON_WOUND_SEVERITY: tuple[int, int] = (30, 70)

EXECUTION_METHODS: dict[str, str] = {
    "beheading": "was beheaded before the assembled court",
    "hanging": "was hanged at the crossroads",
    "burning": "was burned at the stake",
    "poison_cup": "was made to drink the poison cup",
    "drowning": "was drowned in the river",
    "exile_to_death": "was cast into the wastes to die",
}

DISASTER_DEATH_TEXT: dict[str, str] = {
    "earthquake": "crushed in an earthquake",
    "flood": "swept away by a flood",
    "wildfire": "perished in a wildfire",
    "volcano": "buried by a volcanic eruption",
    "storm": "killed in a great storm",
    "landslide": "buried in a landslide",
}

EXILE_BASE_DEATH_CHANCE: float = 0.01
EXILE_DEATH_CHANCE_PER_TICK: float = 0.002
# (age threshold, surcharge) - all thresholds passed apply
EXILE_AGE_SURCHARGES: list[tuple[int, float]] = [(50, 0.01), (65, 0.02)]

# Sporadic hazards evaluated by the lifecycle engine, per character per tick
SPORADIC_ACCIDENT_CHANCE: float = 0.002
SPORADIC_ILLNESS_CHANCE: float = 0.001
ROLE_ACCIDENT_WEIGHTS: dict[str, dict[str, float]] = {
    "general": {"hunting": 2, "tournament": 3, "travel": 2, "construction": 0.5, "fire": 0.5},
    "warrior": {"hunting": 3, "tournament": 3, "travel": 1, "construction": 1, "fire": 0.5},
    "ruler": {"hunting": 3, "tournament": 1, "travel": 2, "construction": 0.5, "fire": 0.5},
    "merchant": {"hunting": 0.5, "tournament": 0.2, "travel": 4, "construction": 1, "fire": 1},
    "commoner": {"hunting": 1, "tournament": 0.2, "travel": 1, "construction": 3, "fire": 2},
}
DEFAULT_ACCIDENT_WEIGHTS: dict[str, float] = {
    "hunting": 1, "tournament": 1, "travel": 2, "construction": 1, "fire": 1,
}

# =============================================================================
# BIRTHS & PROMOTIONS
# =============================================================================
BIRTH_ROLES: set[str] = {"ruler", "heir"}
FERTILITY_AGE_RANGE: tuple[int, int] = (16, 50)
MAX_LIVING_CHILDREN: int = 5
BIRTH_COOLDOWN_TICKS: int = 12
BIRTH_BASE_CHANCE: float = 0.02
BIRTH_PIETY_BONUS_PER_POINT: float = 0.0002   # piety 100 -> +2%

RISING_STAR_ROLES: list[str] = ["general", "advisor", "rival", "priest"]
RISING_STAR_BASE_CHANCE: float = 0.03
RISING_STAR_MIN_POPULATION: int = 50
RISING_STAR_FULL_POPULATION: int = 1000
RISING_STAR_PROMOTE_EXISTING_CHANCE: float = 0.5
# Trait each rising-star role is chosen for when promoting an existing character
RISING_STAR_APTITUDE: dict[str, str] = {
    "general": "courage",
    "advisor": "wisdom",
    "rival": "ambition",
    "priest": "compassion",
}
PROMOTABLE_ROLES: set[str] = {"commoner", "merchant", "scholar", "warrior"}

# =============================================================================
# PROSPERITY EFFECTS
# =============================================================================
PROSPERITY_AMBITION_TIER: int = 3
PROSPERITY_GOLDEN_TIER: int = 4
PROSPERITY_HOPE_BOOST: int = 5
PROSPERITY_PLOT_CHANCE: float = 0.1
PROSPERITY_SOFTENING_CHANCE: float = 0.05
PROSPERITY_PLOT_PROGRESS: int = 5
PROSPERITY_COURAGE_LOSS: int = 2
PROSPERITY_COURAGE_FLOOR: int = 10
PROSPERITY_GREED_GAIN: int = 3
PROSPERITY_LOYALTY_LOSS: int = 2

# =============================================================================
# SUCCESSION
# =============================================================================
HEIR_LOYALTY_THRESHOLD: int = 50
AMBITION_CLAIM_THRESHOLD: int = 60
CIVIL_WAR_LOSER_DEATH_CHANCE: float = 0.5
CIVIL_WAR_CASUALTIES: tuple[int, int] = (500, 1500)
CIVIL_WAR_TITLE: str = "Lord Protector"
COUP_TITLE: str = "Usurper"
ELECTED_RULER_TITLE: str = "Chief"
ELECTED_RULER_AGE: int = 35
CIVIL_WAR_DEATH_CAUSE: str = "killed in succession war"

# Legitimacy starting values by how the ruler gained power
LEGITIMACY_BY_SOURCE: dict[str, tuple[float, float]] = {
    "inheritance": (85.0, 10.0),
    "election": (70.0, 10.0),
    "conquest": (50.0, 15.0),
    "coup": (30.0, 10.0),
}
CONTESTED_LEGITIMACY_PENALTY: float = 20.0
# Starting popular trust, derived from legitimacy and charisma
TRUST_BASE: float = 50.0
TRUST_LEGITIMACY_FACTOR: float = 0.3
TRUST_CHARISMA_FACTOR: float = 0.3
TRUST_RANGE: tuple[float, float] = (20.0, 80.0)

# Regicide consequences
REGICIDE_BOND_TYPE: str = "blood_debt"
REGICIDE_BOND_INTENSITY: float = 90.0
REGICIDE_VICTIM_MEMORY_WEIGHT: float = -80.0
REGICIDE_KILLER_MEMORY_WEIGHT: float = 40.0

# Hereditary bonds
BOND_GENERATIONAL_DECAY: float = 15.0
BOND_DORMANT_THRESHOLD: float = 20.0
BOND_FORGOTTEN_THRESHOLD: float = 5.0
BOND_REINFORCEMENT_BOOST: float = 20.0
BOND_MAX_INTENSITY: float = 100.0
MEMORY_WEIGHT_RANGE: tuple[float, float] = (-100.0, 100.0)

# =============================================================================
# RECORDS
# =============================================================================
MAX_DEEDS: int = 20

# =============================================================================
# WORLD GENERATION (demo runs)
# =============================================================================
INITIAL_TERRITORIES: int = 4
INITIAL_COURT: list[str] = ["ruler", "heir", "general", "advisor", "rival", "priest"]
INITIAL_COMMONERS: int = 6
TERRITORY_NAMES: list[str] = [
    "Highmarch", "Saltmere", "Ambervale", "Duskwood", "Stormreach", "Greenhollow",
    "Ironcrag", "Mistfen", "Sunspire", "Wolfden",
]
# Starting aggregates for generated territories, (low, high) inclusive
TERRITORY_POPULATION_RANGE: tuple[int, int] = (40, 1200)
TERRITORY_STAT_RANGE: tuple[int, int] = (20, 80)
TERRITORY_FOOD_RANGE: tuple[int, int] = (10, 150)
TERRITORY_SHELTER_SLACK_RANGE: tuple[float, float] = (0.8, 1.3)
TERRITORY_WAR_CHANCE: float = 0.15
# Per-tick random walk of aggregates in demo runs
TERRITORY_DRIFT_SD: float = 2.0
TERRITORY_POPULATION_GROWTH_SD: float = 0.01
TERRITORY_WAR_TOGGLE_CHANCE: float = 0.02
RELIGION_NAMES: list[str] = [
    "the Old Gods", "the Burning Sun", "the Silent Mother", "the Twelve", "the Deep Tide",
]

# Score needed for prosperity tiers 1-5 (tier 0 below the first)
PROSPERITY_TIER_THRESHOLDS: list[int] = [25, 50, 75, 100, 150]
PROSPERITY_MILITARY_SOFT_CAP: float = 60.0

# Skirmishes and healers standing in for the combat and medicine systems
WAR_ROLES: set[str] = {"general", "warrior"}
WAR_WOUND_CHANCE: float = 0.02
WAR_WOUND_SEVERITY: tuple[int, int] = (10, 60)
TREATMENT_CHANCE: float = 0.5
TREATMENT_WEIGHTS: dict[str, float] = {
    "herbal": 4.0, "surgical": 2.0, "experimental": 0.5, "spiritual": 1.0, "rest": 2.0,
}
RELIGION_CHANCE: float = 0.75

# Court intrigue standing in for the plot system
PLOT_PROGRESS_RANGE: tuple[int, int] = (1, 5)  # percent per tick
PLOT_COMPLETE: int = 100
PLOT_DISCOVERY_PER_VIGILANCE: float = 0.0005   # ruler vigilance 80 -> 4% per tick
PLOT_ASSASSINATION_CAUSE: str = "assassinated by conspirators"

# =============================================================================
# DASHBOARD
# =============================================================================
DASHBOARD_ROLLING_WINDOW: int = 12  # ticks averaged in the deaths plot
