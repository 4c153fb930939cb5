"""
BTSim Simulation Templates

Static content tables for simulated phishing: per-site/per-type templates,
senders, brand styling and per-type training text.
"""

from dataclasses import dataclass
from typing import Dict, List

from btsim.models.context import Site
from btsim.models.simulation import AttackType, Placement, Urgency, Difficulty


@dataclass(frozen=True)
class Template:
    """One renderable simulation template."""
    title: str
    body: str
    action_text: str
    placement: Placement = Placement.MODAL


@dataclass(frozen=True)
class Sender:
    name: str
    email: str


# =============================================================================
# CONTEXT-ENRICHED TEMPLATES
# =============================================================================

# Neutral credential-harvest family used whenever a (site, type) pair has
# no templates of its own.
DEFAULT_TEMPLATES: List[Template] = [
    Template(
        title="Security notice: verify your account",
        body="We noticed a sign-in to your account from a new location. "
             "Please confirm it was you, {username}, to keep {site} secure.",
        action_text="Verify Account",
        placement=Placement.MODAL,
    ),
    Template(
        title="Your session needs attention",
        body="Your access to {organization} resources will pause soon. "
             "Sign in again to continue working.",
        action_text="Sign In",
        placement=Placement.NOTIFICATION,
    ),
]

ENRICHED_TEMPLATES: Dict[Site, Dict[AttackType, List[Template]]] = {
    Site.GITHUB: {
        AttackType.CREDENTIAL_HARVEST: [
            Template(
                "Critical: Repository access suspended",
                "We detected suspicious activity on your account. Your repository access has been "
                "temporarily suspended. Verify your identity to restore access.",
                "Verify Identity", Placement.MODAL,
            ),
            Template(
                "Security alert: New sign-in from unknown device",
                "A new device signed in to your GitHub account from an unrecognized location. "
                "If this wasn't you, secure your account immediately.",
                "Review Activity", Placement.MODAL,
            ),
        ],
        AttackType.OAUTH_GRANT: [
            Template(
                "GitHub App Authorization Required",
                'The GitHub App "DevOps Toolkit" is requesting access to your repositories in '
                "{organization}. Grant access to continue using automated workflows.",
                "Authorize App", Placement.BANNER,
            ),
        ],
        AttackType.MFA_BYPASS: [
            Template(
                "Two-Factor Authentication Update Required",
                "We're updating our 2FA system. Please verify your backup codes to ensure "
                "continued access to your account.",
                "Update 2FA", Placement.MODAL,
            ),
        ],
        AttackType.SESSION_HIJACK: [
            Template(
                "Session Expired",
                "Your session has expired due to inactivity. Please sign in again to continue.",
                "Sign In", Placement.NOTIFICATION,
            ),
        ],
        AttackType.CLIPBOARD_HIJACK: [
            Template(
                "Verification Code",
                "Your one-time verification code is ready. Click to copy to clipboard.",
                "Copy Code", Placement.NOTIFICATION,
            ),
        ],
        AttackType.FILE_DOWNLOAD: [
            Template(
                "Security Report Available",
                "Your repository security scan has completed. Download the detailed report.",
                "Download Report", Placement.NOTIFICATION,
            ),
        ],
    },
    Site.LINKEDIN: {
        AttackType.CREDENTIAL_HARVEST: [
            Template(
                "{connection} shared a post with you",
                "{connection} thought you'd be interested in this article. "
                "View it now to see what they shared.",
                "View Post", Placement.NOTIFICATION,
            ),
            Template(
                "Your LinkedIn Premium trial expires today",
                "Don't lose access to Premium features. Update your payment information to "
                "continue enjoying LinkedIn Premium.",
                "Update Payment", Placement.MODAL,
            ),
            Template(
                "You appeared in {count} searches this week",
                "Recruiters from {organization} and other companies looked at your profile. "
                "Sign in to see who is interested.",
                "See Searches", Placement.NOTIFICATION,
            ),
        ],
        AttackType.OAUTH_GRANT: [
            Template(
                "New App Connection Request",
                '"Resume Builder Pro" wants to access your LinkedIn profile. '
                "This will help optimize your job search.",
                "Connect App", Placement.BANNER,
            ),
        ],
        AttackType.MFA_BYPASS: [
            Template(
                "Account Verification Required",
                "To continue using LinkedIn securely, please verify your account with your phone number.",
                "Verify Now", Placement.MODAL,
            ),
        ],
        AttackType.SESSION_HIJACK: [
            Template(
                "Login Required",
                "Please sign in again to view this content from your network.",
                "Sign In", Placement.MODAL,
            ),
        ],
        AttackType.CLIPBOARD_HIJACK: [],
        AttackType.FILE_DOWNLOAD: [],
    },
    Site.GMAIL: {
        AttackType.CREDENTIAL_HARVEST: [
            Template(
                "Google: Sign-in attempt was blocked",
                "Someone just used your password to try to sign in to {email}. "
                "We blocked them, but you should check what happened.",
                "Check Activity", Placement.MODAL,
            ),
            Template(
                "Your Gmail storage is 99% full",
                "You are running out of storage space. Upgrade now to avoid losing emails "
                "or upgrade to Google One for more storage.",
                "Free Up Space", Placement.BANNER,
            ),
        ],
        AttackType.OAUTH_GRANT: [
            Template(
                "Security Checkup: Third-party access",
                "An app you haven't used in 30 days still has access to your Google Account. "
                "Review and revoke if unnecessary.",
                "Review Access", Placement.NOTIFICATION,
            ),
        ],
        AttackType.MFA_BYPASS: [
            Template(
                "2-Step Verification Update",
                "We're making 2-Step Verification more secure. Update your settings to "
                "continue protecting your account.",
                "Update Settings", Placement.MODAL,
            ),
        ],
        AttackType.SESSION_HIJACK: [
            Template(
                "Session Timeout",
                "For your security, your session has expired. Please sign in again.",
                "Sign In", Placement.MODAL,
            ),
        ],
        AttackType.CLIPBOARD_HIJACK: [],
        AttackType.FILE_DOWNLOAD: [
            Template(
                "Secure file shared with you",
                "Someone shared a confidential document with you via Google Drive. "
                "Download requires verification.",
                "Download File", Placement.NOTIFICATION,
            ),
        ],
    },
    Site.UNKNOWN: {},
}

# Fallback text for each placeholder when the context lacks the value
PLACEHOLDER_DEFAULTS: Dict[str, str] = {
    "username": "there",
    "email": "your email",
    "organization": "your organization",
    "connection": "Someone",
    "site": "your account",
}

SEARCH_COUNT_RANGE = (10, 49)


def get_templates(site: Site, attack_type: AttackType) -> List[Template]:
    """
    Templates for a (site, type) pair.

    Always non-empty: missing or empty families resolve to DEFAULT_TEMPLATES.
    """
    templates = ENRICHED_TEMPLATES.get(site, {}).get(attack_type)
    return templates if templates else DEFAULT_TEMPLATES


# =============================================================================
# LOCAL HEURISTIC TEMPLATES
# =============================================================================

LOCAL_SUBJECTS: Dict[Site, List[str]] = {
    Site.GITHUB: [
        "Critical: Repository access suspended",
        "Security alert: Unusual sign-in detected",
        "Action required: 2FA verification needed",
        "Your GitHub Copilot subscription expires today",
        "Repository transfer request from {organization}",
    ],
    Site.LINKEDIN: [
        "Someone shared a post with you",
        "Your profile is getting noticed this week",
        "Your LinkedIn Premium trial expires today",
        "Action required: Verify your identity",
        "A connection endorsed you for a skill",
    ],
    Site.GMAIL: [
        "Google Workspace: Security alert",
        "Your Gmail storage is 99% full",
        "Sign-in attempt blocked",
        "Verify your recovery email",
        "Google Drive: File shared with you",
    ],
    Site.UNKNOWN: [
        "Security alert: Action required",
        "Please verify your account",
    ],
}

LOCAL_BODIES: Dict[AttackType, List[str]] = {
    AttackType.CREDENTIAL_HARVEST: [
        "We noticed unusual activity on your {site} account. Please verify your identity to prevent account suspension.",
        "Your {site} session has expired. Please log in again to continue.",
        "A suspicious login attempt was detected from a new device. Confirm your identity immediately.",
        "Your {site} account requires verification due to security policy updates.",
    ],
    AttackType.OAUTH_GRANT: [
        "A third-party application is requesting access to your {site} account. Review and approve the permissions.",
        "Grant access to continue using {site} integration with your productivity tools.",
        "Authorization required: A new device is attempting to sync with your account.",
    ],
    AttackType.MFA_BYPASS: [
        "Your two-factor authentication needs to be reconfigured. Click below to update your security settings.",
        "We've upgraded our security system. Please verify your backup codes to maintain account access.",
        "MFA sync required: Your authenticator app needs to be reconnected.",
    ],
    AttackType.SESSION_HIJACK: [
        "Your session has been terminated due to inactivity. Please sign in again to continue.",
        "Multiple concurrent sessions detected. Verify your current session to continue.",
    ],
    AttackType.CLIPBOARD_HIJACK: [
        "Copy this verification code to complete your action.",
        "Use this one-time password for verification.",
    ],
    AttackType.FILE_DOWNLOAD: [
        "A secure document has been shared with you. Download and review immediately.",
        "Your invoice is ready for download. Click to access your files.",
    ],
}

LOCAL_ACTION_TEXT: Dict[AttackType, str] = {
    AttackType.CREDENTIAL_HARVEST: "Verify Account",
    AttackType.OAUTH_GRANT: "Grant Access",
    AttackType.MFA_BYPASS: "Update Security",
    AttackType.SESSION_HIJACK: "Sign In",
    AttackType.CLIPBOARD_HIJACK: "Copy Code",
    AttackType.FILE_DOWNLOAD: "Download Now",
}

LOCAL_PLACEMENTS: Dict[AttackType, List[Placement]] = {
    AttackType.CREDENTIAL_HARVEST: [Placement.MODAL, Placement.MODAL, Placement.NOTIFICATION],
    AttackType.OAUTH_GRANT: [Placement.MODAL, Placement.BANNER],
    AttackType.MFA_BYPASS: [Placement.MODAL, Placement.NOTIFICATION],
    AttackType.SESSION_HIJACK: [Placement.BANNER, Placement.NOTIFICATION],
    AttackType.CLIPBOARD_HIJACK: [Placement.NOTIFICATION, Placement.INLINE],
    AttackType.FILE_DOWNLOAD: [Placement.NOTIFICATION, Placement.MODAL],
}

SITE_DISPLAY_NAMES: Dict[Site, str] = {
    Site.GITHUB: "GitHub",
    Site.LINKEDIN: "LinkedIn",
    Site.GMAIL: "Gmail",
}


# =============================================================================
# SENDERS & STYLING
# =============================================================================

SENDER_NAMES: Dict[Site, List[str]] = {
    Site.GITHUB: ["GitHub Security", "GitHub Support", "GitHub Actions", "GitHub Team"],
    Site.LINKEDIN: ["LinkedIn", "LinkedIn Security", "LinkedIn Notifications"],
    Site.GMAIL: ["Google", "Gmail Team", "Google Security"],
    Site.UNKNOWN: ["Security Team"],
}

SENDER_EMAILS: Dict[Site, List[str]] = {
    Site.GITHUB: ["noreply@github.com", "security@github.com", "support@github.com"],
    Site.LINKEDIN: ["messages-noreply@linkedin.com", "security@linkedin.com"],
    Site.GMAIL: ["no-reply@accounts.google.com", "noreply@google.com"],
    Site.UNKNOWN: ["security@notification.local"],
}

ACTION_DOMAINS: Dict[Site, str] = {
    Site.GITHUB: "github.com",
    Site.LINKEDIN: "linkedin.com",
    Site.GMAIL: "google.com",
    Site.UNKNOWN: "example.com",
}

BRAND_COLORS: Dict[Site, List[str]] = {
    Site.GITHUB: ["#24292e", "#0366d6"],
    Site.LINKEDIN: ["#0077b5", "#000000"],
    Site.GMAIL: ["#4285f4", "#ea4335", "#fbbc05", "#34a853"],
    Site.UNKNOWN: ["#333333"],
}


def action_url(site: Site) -> str:
    return f"https://{ACTION_DOMAINS.get(site, ACTION_DOMAINS[Site.UNKNOWN])}/security-check"


# =============================================================================
# PLANNING TABLES
# =============================================================================

# Repeated entries weight the draw
SITE_ATTACK_WEIGHTS: Dict[Site, List[AttackType]] = {
    Site.GITHUB: [
        AttackType.CREDENTIAL_HARVEST, AttackType.OAUTH_GRANT,
        AttackType.CREDENTIAL_HARVEST, AttackType.MFA_BYPASS,
    ],
    Site.LINKEDIN: [
        AttackType.CREDENTIAL_HARVEST, AttackType.OAUTH_GRANT, AttackType.CREDENTIAL_HARVEST,
    ],
    Site.GMAIL: [
        AttackType.CREDENTIAL_HARVEST, AttackType.MFA_BYPASS,
        AttackType.CREDENTIAL_HARVEST, AttackType.SESSION_HIJACK,
    ],
    Site.UNKNOWN: [
        AttackType.CREDENTIAL_HARVEST, AttackType.OAUTH_GRANT, AttackType.MFA_BYPASS,
    ],
}

# Suggested-vector labels that are not themselves attack types
VECTOR_ALIASES: Dict[str, AttackType] = {
    "connection_impersonation": AttackType.CREDENTIAL_HARVEST,
}

# Most sophisticated first
SOPHISTICATION_ORDER: List[AttackType] = [
    AttackType.OAUTH_GRANT,
    AttackType.MFA_BYPASS,
    AttackType.SESSION_HIJACK,
    AttackType.FILE_DOWNLOAD,
    AttackType.CLIPBOARD_HIJACK,
    AttackType.CREDENTIAL_HARVEST,
]

# Chance of picking the most sophisticated candidate outright
SOPHISTICATION_BOOST: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 0.25,
    Difficulty.HARD: 0.5,
    Difficulty.EXPERT: 1.0,
}

URGENCY_BY_DIFFICULTY: Dict[Difficulty, List[Urgency]] = {
    Difficulty.EASY: [Urgency.LOW, Urgency.LOW, Urgency.MEDIUM],
    Difficulty.MEDIUM: [Urgency.MEDIUM, Urgency.HIGH],
    Difficulty.HARD: [Urgency.HIGH, Urgency.CRITICAL],
    Difficulty.EXPERT: [Urgency.CRITICAL, Urgency.HIGH, Urgency.CRITICAL],
}

TRAINING_OBJECTIVES: Dict[AttackType, str] = {
    AttackType.CREDENTIAL_HARVEST: "Recognize credential harvesting attempts",
    AttackType.OAUTH_GRANT: "Identify malicious OAuth requests",
    AttackType.MFA_BYPASS: "Detect MFA bypass attempts",
    AttackType.SESSION_HIJACK: "Recognize session hijacking indicators",
    AttackType.CLIPBOARD_HIJACK: "Identify clipboard manipulation",
    AttackType.FILE_DOWNLOAD: "Recognize malicious download prompts",
}

RED_TEAM_OBJECTIVE = "Red team exercise"
