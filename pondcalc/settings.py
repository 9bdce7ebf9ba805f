# Core settings and constants for the pond digging calculator

CUBIC_FEET_PER_CUBIC_YARD = 27.0     # pond dims are feet, equipment is cubic yards
MINUTES_PER_HOUR = 60.0

# Persistence
STORAGE_KEY = "pondDiggingCalculator"
STORAGE_SCHEMA_VERSION = 2           # 1 = legacy flat fields, 2 = fleet arrays
STORAGE_PATH_ENV = "POND_CALC_STORAGE"
DEFAULT_STORAGE_PATH = "~/.pond_calculator/storage.json"

# Configuration
CONFIG_PATH_ENV = "POND_CALC_CONFIG"
CONFIG_FILENAME = "equipment-defaults.json"

# Logging
LOG_LEVEL_ENV = "POND_CALC_LOG_LEVEL"
LOG_FILE_ENV = "POND_CALC_LOG_FILE"

# Results panel polls the debouncer this often (seconds)
RESULTS_POLL_SECONDS = 0.1
