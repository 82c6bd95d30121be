"""Global configuration: constants shared across the engine."""

# Legacy tokens that mean "matches anything" in a rule scope dimension.
# Compared case-insensitively after stripping whitespace.
WILDCARD_TOKENS = frozenset({"TODOS", "TODAS", "TODOS (CUALQUIER CLIENTE)", "*"})

# Decimal places used when comparing quantities against rule ranges
ROUND_DIGITS = 2

# Minutes above the standard still considered a normal operation
NORMAL_TOLERANCE_MINUTES = 10

# Quantity flag used on a liquidation line whose gross weight is not yet known
PENDING_QUANTITY = -1

# Concepts that represent a load/unload operation and get a productivity indicator
LOAD_UNLOAD_CONCEPTS = ("CARGUE", "DESCARGUE")

# Default day-shift window used when a concept omits one
DEFAULT_DAY_SHIFT_START = "00:00"
DEFAULT_DAY_SHIFT_END = "18:00"

# Scope dimensions, most significant first.  Tier ordering depends on this order.
SCOPE_DIMENSIONS = ("client", "operation_type", "product_type")

# Tier number reported for a substring-fallback match
SUBSTRING_TIER = 2 ** len(SCOPE_DIMENSIONS) + 1
