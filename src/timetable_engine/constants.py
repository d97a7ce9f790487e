"""Constants for timetable generation."""

# Working week, in scheduling order
WORKING_DAYS = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY"]

# Subjects whose name contains one of these markers are weighted up in the pool
CORE_SUBJECT_MARKERS = ["english", "mathematics", "math", "basic science", "science"]

# Pool weights (copies of a unit in the weighted pool)
CORE_UNIT_WEIGHT = 3
DEFAULT_UNIT_WEIGHT = 2

# Workload thresholds (periods per week)
# LOW < 10 <= NORMAL <= 25 < HIGH <= 30 < OVERLOADED
WORKLOAD_LOW_THRESHOLD = 10
WORKLOAD_NORMAL_THRESHOLD = 25
WORKLOAD_HIGH_THRESHOLD = 30

# Generation defaults
DEFAULT_MAX_SAME_UNIT_PER_DAY = 2
DEFAULT_FREE_PERIODS_PER_DAY = 1

# Probability of one extra free period on a given day
EXTRA_FREE_PERIOD_PROBABILITY = 0.5

# Display label carried by free lesson periods
FREE_PERIOD_LABEL = "Free Period"

# Category whose template is used when the category is unknown
DEFAULT_CATEGORY = "SECONDARY"

# Time format for slot boundaries
TIME_FORMAT = "%H:%M"
