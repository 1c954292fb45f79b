# spareparts_pos/constants.py
APP_NAME = "Spare Parts POS"
ORG_NAME = "SparePartsPOS"

# Filesystem layout (relative to the app home directory)
HOME_ENV_VAR = "SPAREPARTS_POS_HOME"
DATA_DIR = "data"
DB_FILE_NAME = "shop.db"
SETTINGS_FILE_NAME = "settings.json"
BACKUP_DIR_NAME = "backups"
LOG_DIR_NAME = "logs"
STYLE_FILE = "styles.qss"

# Schema bookkeeping
TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# Business defaults (overridable through settings.json)
DEFAULT_TAX_RATE = 0.15
DEFAULT_CURRENCY = "USD"
DEFAULT_LOW_STOCK_THRESHOLD = 5
MONEY_PLACES = 2

# Order numbering
SALE_NUMBER_PREFIX = ""
PURCHASE_NUMBER_PREFIX = "PO-"
NUMBER_SUFFIX_WIDTH = 4

# Enumerations
PAYMENT_METHODS = ("cash", "card", "credit")
PAYMENT_STATUSES = ("pending", "partial", "paid")
DISCOUNT_TYPES = ("amount", "percent")
USER_ROLES = ("admin", "cashier", "manager")

# Backups
BACKUP_FILE_PREFIX = "backup-"
BACKUP_FILE_SUFFIX = ".db"
SAFETY_COPY_PREFIX = "pre-restore-"
