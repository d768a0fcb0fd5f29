from __future__ import annotations


STARTING_MONEY = 500

COST_MULTIPLIERS = {
    "easy": 0.8,
    "normal": 1.0,
    "hard": 1.2,
}
REVENUE_MULTIPLIERS = {
    "easy": 1.2,
    "normal": 1.0,
    "hard": 0.8,
}

BASE_WEEKLY_COST = 100
MEMBER_WEEKLY_SALARY = 50

EQUIPMENT_TIER_COSTS = {
    "basic": 20,
    "good": 50,
    "professional": 100,
}
EQUIPMENT_DEFAULT_COST = 20

TRANSPORT_TIER_COSTS = {
    "none": 0,
    "van": 50,
    "bus": 150,
    "tourBus": 300,
}
TRANSPORT_TIER_BY_INDEX = (0, 50, 150, 300)

MANAGER_COSTS = {
    "dodgy": 80,
    "pro": 150,
}
LAWYER_COST = 90
INDEPENDENT_LABEL_DEFAULT_FEE = 20

STREAM_PAYOUT = 0.004
SONG_STREAMS_PER_POPULARITY = 60
SONG_STREAMS_PER_QUALITY = 40
ALBUM_STREAMS_PER_QUALITY = 150
ALBUM_STREAMS_PER_POPULARITY = 80
REVENUE_FRESHNESS_DECAY = 0.02
REVENUE_FRESHNESS_FLOOR = 0.3

RADIO_POPULARITY_PER_PLAY = 12
RADIO_PAY_PER_PLAY = 2

SONG_WEEKLY_DECAY = 1
FRESHNESS_STREAM_FACTOR = 6
FRESHNESS_WEIGHT_DECAY = 0.05
VIDEO_STREAM_BONUS = 400
ALBUM_STREAM_BONUS_RATE = 0.15
ALBUM_PROMO_POPULARITY_RATE = 0.5

VIRAL_CHANCE = 0.03
VIRAL_POPULARITY_SPIKE = 25
PLAYLIST_PITCH_CHANCE = 0.15
PLAYLIST_PITCH_MIN = 5
PLAYLIST_PITCH_MAX = 19
RADIO_PROMO_CHANCE = 0.12
RADIO_PROMO_MIN = 3
RADIO_PROMO_MAX = 10

ALBUM_EARLY_WEEKS = 14
ALBUM_QUALITY_CHART_WEIGHT = 0.8
ALBUM_MARKETING_PROMO_DIVISOR = 100
ALBUM_MARKETING_CHART_DIVISOR = 10

TREND_START_CHANCE = 0.15
TREND_MAJOR_ROLL = 0.3
TREND_MODERATE_ROLL = 0.6
TREND_PROFILES = {
    "major": {"modifier": (18, 7), "weeks": (6, 2), "decay": 1.5},
    "moderate": {"modifier": (12, 5), "weeks": (4, 1), "decay": 1.0},
    "minor": {"modifier": (6, 3), "weeks": (2, 1), "decay": 0.5},
}
TREND_MODIFIER_FLOOR = 2
TREND_GENRE_POPULARITY_BONUS = 10
TREND_RETIRE_PENALTY = 5
TREND_RETIRE_FLOOR = 30
GENRE_BASELINE_POPULARITY = 50

SUMMER_WEEKS = (20, 35)
SUMMER_GENRES = frozenset({"Pop", "Dance", "Electronic", "EDM"})
SUMMER_BOOST = 8
HOLIDAY_WINDOWS = ((45, 52), (1, 5))
HOLIDAY_GENRES = frozenset({"Pop", "Rock"})
HOLIDAY_BOOST = 5

FAN_GROWTH_FAME_DIVISOR = 10
FAN_GROWTH_CATALOG_BONUS = 5

MERCH_BASE_RATE = 50
MERCH_FAME_SATURATION = 5000
MERCH_DECAY_RATE = 0.1
MERCH_PRICE_FLOOR = 0.7
MERCH_PRICE_QUALITY_WEIGHT = 0.3

ALBUM_MIN_SONGS = 8
ALBUM_MAX_SONGS = 12
ALBUM_INITIAL_PROMO = 12
ALBUM_COST_PER_SONG_RATE = 0.8
ALBUM_RELEASE_OVERHEAD = 1.5
ALBUM_QUALITY_BONUS_WEIGHT = 1.5
ALBUM_POPULARITY_WEIGHT = 1.2
ALBUM_POPULARITY_BONUS_WEIGHT = 2
ALBUM_FAME_RATE = 0.2

STUDIO_TIERS = {
    "demo": {"name": "Demo Studio", "record_cost": 80, "quality_bonus": 0, "popularity_bonus": 0},
    "professional": {"name": "Professional Studio", "record_cost": 150, "quality_bonus": 8, "popularity_bonus": 1},
    "manor": {"name": "The Manor", "record_cost": 300, "quality_bonus": 15, "popularity_bonus": 2},
}
DEFAULT_STUDIO_TIER = "demo"

LABEL_DEAL_TIERS = {
    "independent": {
        "name": "Independent",
        "monthly_fee": 20,
        "royalty_split": 0,
        "marketing_budget": 0,
        "playlist_pitch": False,
        "radio_promo": False,
        "contract_weeks": 0,
        "advance": 0,
        "fame_req": 0,
    },
    "distribution": {
        "name": "Distribution Deal",
        "monthly_fee": 0,
        "royalty_split": 15,
        "marketing_budget": 200,
        "playlist_pitch": True,
        "radio_promo": False,
        "contract_weeks": 24,
        "advance": 500,
        "fame_req": 50,
    },
    "360": {
        "name": "360 Deal",
        "monthly_fee": 0,
        "royalty_split": 30,
        "marketing_budget": 600,
        "playlist_pitch": True,
        "radio_promo": True,
        "contract_weeks": 52,
        "advance": 2000,
        "fame_req": 150,
    },
    "major": {
        "name": "Major Label",
        "monthly_fee": 0,
        "royalty_split": 50,
        "marketing_budget": 2000,
        "playlist_pitch": True,
        "radio_promo": True,
        "contract_weeks": 104,
        "advance": 10000,
        "fame_req": 300,
    },
}

DEFAULT_GENRES = (
    "Synth Pop",
    "Indie Rock",
    "Hip-Hop",
    "Metal",
    "Blues",
    "Pop",
    "EDM",
    "Experimental",
    "Punk",
    "Country",
    "R&B",
    "Funk",
    "Jazz",
    "Soul",
    "Reggae",
    "Classical",
)

CONSEQUENCE_ACTIVE_MAX_AGE_WEEKS = 100
CONSEQUENCE_DORMANT_MAX_AGE_WEEKS = 150
DEMOTED_RESURFACE_PROBABILITY = 0.05

RIVAL_STALE_AFTER_WEEKS = 4
RIVAL_BAND_COUNT = 6
CHART_SIZE = 10


def cost_multiplier(difficulty: str) -> float:
    return COST_MULTIPLIERS.get(str(difficulty or "normal"), 1.0)


def revenue_multiplier(difficulty: str) -> float:
    return REVENUE_MULTIPLIERS.get(str(difficulty or "normal"), 1.0)


def studio_profile(tier: str | None) -> dict:
    return STUDIO_TIERS.get(str(tier or DEFAULT_STUDIO_TIER), STUDIO_TIERS[DEFAULT_STUDIO_TIER])
