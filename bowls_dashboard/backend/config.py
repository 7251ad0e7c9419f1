# backend/config.py

# Database path (relative to this directory unless absolute)
DATABASE_PATH = "data/bowls.db"

# Head-to-head drill setup limits
DEFAULT_NUM_ENDS = 10
MIN_ENDS = 1
MAX_ENDS = 21
DEFAULT_BOWLS_PER_PLAYER = 4

# 40 Bowls Draw: 10 ends x (2 long jack + 2 short jack) = 40 bowls
FORTY_BOWLS_ENDS = 10
BOWLS_PER_JACK = 2

LEAD_BOWLS_OPTIONS = (2, 3, 4)
SECONDS_CHANCE_BOWLS_OPTIONS = (2, 4)

# Lead vs Lead point award: "adjudicated" (shot winner + shots won entered
# at end completion) or "count" (side holding more bowls wins the end)
LEAD_SCORING_RULE = "adjudicated"
LEAD_SCORING_RULES = ("adjudicated", "count")
SHOT_POINTS = 3           # points per shot won
PENALTY_POINTS = 1        # deducted per crossed / short bowl

WEATHER_OPTIONS = ("Sunny", "Cloudy", "Windy", "Very Windy", "Rainy", "Indoor")
SURFACE_OPTIONS = ("grass", "synthetic", "weave", "indoor")

# History listing
HISTORY_PAGE_SIZE = 50
