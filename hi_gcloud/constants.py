"""Timeouts (seconds) and limits used when talking to gcloud."""

# Metadata queries
PROBE_TIMEOUT = 5
CONFIG_VALUE_TIMEOUT = 5
AUTH_LIST_TIMEOUT = 10
CONFIG_LIST_TIMEOUT = 10

# Data queries
LOGS_TIMEOUT = 60
RUN_DESCRIBE_TIMEOUT = 30
STORAGE_TIMEOUT = 30
SECRETS_TIMEOUT = 15
SERVICES_TIMEOUT = 30
BILLING_TIMEOUT = 15

DEFAULT_TIME_RANGE = "1h"
DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 500
DEFAULT_STORAGE_LIMIT = 50
SQL_ROW_LIMIT = 100

MESSAGE_TRUNCATE = 200
ERROR_DETAIL_TRUNCATE = 150
RECENT_ERRORS_SHOWN = 5

ERROR_SEVERITIES = ("ERROR", "CRITICAL", "ALERT", "EMERGENCY")

# Values gcloud prints when a property has no value
UNSET_SENTINELS = ("", "(unset)", "unset")
