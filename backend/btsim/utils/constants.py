"""
BTSim Constants - Central location for ALL constant values.
"""

from typing import Dict, List

# APPLICATION INFO
APP_NAME: str = "BTSim"
APP_FULL_NAME: str = "Browser Threat Simulator"
APP_VERSION: str = "1.0.0"
APP_DESCRIPTION: str = "Phishing simulation and credential-risk detection engine"

# DETECTION
DEFAULT_DETECTION_THRESHOLD: float = 0.75
MAX_RISK_FACTORS: int = 5
MODEL_FEATURE_COUNT: int = 12
MODEL_RETRAIN_THRESHOLD: int = 100
MODEL_TIMEOUT_SECONDS: float = 0.5

# CADENCE (milliseconds)
MIN_SIMULATION_INTERVAL_MS: int = 300000
MAX_SIMULATIONS_PER_SESSION: int = 5
MAX_PENDING_SIMULATIONS: int = 50
MAX_SESSION_PLANNERS: int = 1000
SIMULATION_DELAY_MIN_MS: int = 5000
SIMULATION_DELAY_MAX_MS: int = 30000
TRIGGER_PROBABILITY_BASE: float = 0.2
TRIGGER_PROBABILITY_MAX: float = 0.6
TRIGGER_CONTEXT_FACTOR_STEP: float = 0.1
TRIGGER_CONTEXT_FACTOR_MAX: float = 0.4

# USER STATS
BASELINE_RISK_SCORE: int = 50
MIN_RISK_SCORE: int = 0
MAX_RISK_SCORE: int = 100

RISK_WEIGHTS: Dict[str, int] = {
    "credential_entered": 50,
    "link_clicked": 25,
    "simulation_ignored": 10,
    "simulation_detected": -20,
    "reported_phishing": -30,
}

# CONTEXT ANALYSIS
BASELINE_CONTEXT_RISK: int = 50
HIGH_ACTIVITY_THRESHOLD: int = 10
WIDE_GRAPH_THRESHOLD: int = 50
HIGH_ACTIVITY_INCREMENT: int = 10
WIDE_GRAPH_INCREMENT: int = 10
BUSINESS_IMPACT_INCREMENT: int = 5
RISK_PROFILE_HIGH: int = 70
RISK_PROFILE_MEDIUM: int = 40
KEY_CONTACT_LIMIT: int = 5
TOPIC_LIMIT: int = 3
BURST_ACTIVITY_GAP_MS: int = 1000
UNUSUAL_HOURS_START: int = 6
UNUSUAL_HOURS_END: int = 23
DEFAULT_BEST_HOUR: int = 9
DEFAULT_BEST_DAY: int = 0  # Monday

# Declaration order is the tie-break order for topics
TOPIC_KEYWORDS: Dict[str, List[str]] = {
    "security": ["security", "phishing", "password", "auth", "2fa", "mfa"],
    "development": ["code", "repo", "commit", "pull request", "merge", "bug", "feature"],
    "business": ["meeting", "project", "deadline", "client", "revenue", "sales"],
    "cloud": ["aws", "azure", "gcp", "cloud", "serverless", "deployment"],
    "data": ["database", "analytics", "metrics", "dashboard", "report"],
}

DEFAULT_ATTACK_VECTOR: str = "credential_harvest"

# DOMAIN LISTS
KNOWN_LEGITIMATE_DOMAINS: List[str] = [
    "github.com", "linkedin.com", "google.com",
    "accounts.google.com", "login.microsoftonline.com",
    "microsoft.com", "appleid.apple.com", "apple.com", "amazon.com",
]

SHORTENER_DOMAINS: List[str] = [
    "bit.ly", "tinyurl.com", "t.co", "goo.gl", "ow.ly",
    "is.gd", "buff.ly", "rebrand.ly", "cutt.ly", "rb.gy",
    "tiny.cc", "shorturl.at", "lnkd.in",
]

# KEYWORD LISTS
USERNAME_NAME_PATTERNS: List[str] = [
    r"username", r"user", r"email", r"login", r"account", r"identifier", r"signin",
]

SUSPICIOUS_URL_PATTERNS: List[str] = [
    r"signin.*verify", r"secure.*login", r"account.*update",
    r"confirm.*identity", r"auth.*verify", r"login.*verify",
    r"verify.*account", r"security.*check",
]

URGENCY_KEYWORDS: List[str] = [
    "immediately", "urgent", "asap", "right now", "limited time",
    "account will be", "suspended", "terminated", "24 hours",
]

SECURITY_KEYWORDS: List[str] = [
    "verify", "confirm", "update", "security", "unauthorized",
    "suspicious", "breach", "compromised",
]

SECURITY_KEYWORD_BASELINE: int = 2

# Misspellings of security-relevant terms seen in phishing kits
COMMON_MISSPELLINGS: List[str] = [
    "acount", "verfy", "verifiy", "securty", "secuirty",
    "pasword", "passwrod", "confrim", "suspened", "authenticaton",
]

# RED TEAM
RED_TEAM_CAMPAIGN_ID: str = "red-team"
RED_TEAM_DEFAULT_PAYLOAD: str = "Please review the attached document and provide your feedback by EOD."
RED_TEAM_DEFAULT_TITLE: str = "Action Required"
