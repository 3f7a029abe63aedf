"""Centralized constants for IntelliSOC."""


# ===== STORAGE =====
class StorageConstants:
    DATA_DIR_MODE = 0o700
    FILE_MODE = 0o600
    JSON_INDENT = 2
    LOCK_SUFFIX = ".lock"
    TEMP_PREFIX = ".tmp-"


# ===== COLLECTIONS =====
class Collections:
    SESSIONS = "sessions"
    LOGIN_ATTEMPTS = "login_attempts"
    EVENT_LOGS = "event_logs"
    IP_REPUTATION = "ip_reputation"

    ALL = (SESSIONS, LOGIN_ATTEMPTS, EVENT_LOGS, IP_REPUTATION)


# ===== REPUTATION SCORING =====
class ReputationConstants:
    SCORE_MIN = 0
    SCORE_MAX = 100
    INITIAL_SCORE_SUCCESS = 95
    INITIAL_SCORE_FAILURE = 90
    SUCCESS_REWARD = 1
    FAILURE_PENALTY = 5


# ===== SESSIONS =====
class SessionConstants:
    TOKEN_BYTES = 32  # 64 hex characters
    DEFAULT_TTL_HOURS = 24


# ===== ANALYTICS =====
class AnalyticsConstants:
    DEFAULT_TIME_RANGE = "24h"


# ===== API =====
class APIConstants:
    DEFAULT_REMAINING_ATTEMPTS_HINT = 2
    DEFAULT_CLIENT_ADDRESS = "127.0.0.1"
    SERVICE_NAME = "intellisoc-ledger"
