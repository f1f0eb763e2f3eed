"""
Configuration for the Bundle Loader
Keyword lists and thresholds used by normalization, schema inference and stats
"""

# Number of leading records kept in bundle.samples["main"]
SAMPLE_SIZE = 5

# Records sampled by schema inference
SCHEMA_SAMPLE_SIZE = 100

# Default on-disk location of the schema registry
DEFAULT_SCHEMA_CACHE_DIR = "./cache/schemas"

# Extensions with a connector
SUPPORTED_EXTENSIONS = {".csv", ".json", ".xlsx", ".xlsm"}

# Key substrings that route a field to a normalizer
# Order of checks: date > numeric > percent > array > text
DATE_KEYWORDS = ['date', 'time', 'created', 'updated', 'published', 'filing', 'grant']

NUMERIC_KEYWORDS = [
    'count',
    'amount',
    'price',
    'cost',
    'revenue',
    'total',
    'beds',
    'staff',
    'sum',
    'avg',
    'number',
]

PERCENT_KEYWORDS = ['percent', 'rate', 'ratio']
PERCENT_SUFFIX = '_pct'

ARRAY_KEYWORDS = ['mesh', 'cpc', 'ipc', 'tags', 'keywords', 'authors', 'inventors']

TEXT_KEYWORDS = ['title', 'description', 'abstract', 'text', 'name']

# Keys whose text keeps paragraph-joining semantics
ABSTRACT_KEYWORDS = ['abstract', 'description']

# Strings longer than this are treated as free text
LONG_TEXT_THRESHOLD = 50

# Array delimiters in priority order
ARRAY_DELIMITERS = [',', ';', '|']

# Literal date shapes checked before parsing
DATE_PATTERNS = [
    r'^\d{4}-\d{2}-\d{2}',
    r'^\d{1,2}/\d{1,2}/\d{4}',
    r'^\d{4}/\d{2}/\d{2}',
    r'^\d{2}-\d{2}-\d{4}',
]

# Share of values that must parse as dates for a field to be a date
DATE_MATCH_THRESHOLD = 0.8

# Share of values that must look like emails / URLs
EMAIL_MATCH_THRESHOLD = 0.9
URL_MATCH_THRESHOLD = 0.9

# Enum detection: at most this many distinct values...
MAX_ENUM_VALUES = 10
# ...and fewer distinct values than this share of the sample
ENUM_DISTINCT_RATIO = 0.5

# Share of values that must coerce to numbers for a numeric range
NUMERIC_RANGE_THRESHOLD = 0.8

# Entries kept per column distribution
TOP_DISTRIBUTION_VALUES = 10

# Values treated as booleans
BOOLEAN_STRINGS = {'true', 'false', 'yes', 'no'}
