"""Application constants.

Table names, token shape, and the GitHub / webhook wire conventions.
"""

# ---------------------------------------------------------------------------
# Supabase tables
# ---------------------------------------------------------------------------
CANDIDATES_TABLE: str = "candidates"
RELEASES_TABLE: str = "releases"

# ---------------------------------------------------------------------------
# Download tokens
# 64-symbol URL-safe alphabet, 12 symbols -> 72 bits per token.
# ---------------------------------------------------------------------------
TOKEN_ALPHABET: str = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-"
)
TOKEN_LENGTH: int = 12

# ---------------------------------------------------------------------------
# GitHub releases
# ---------------------------------------------------------------------------
GITHUB_ACCEPT_HEADER: str = "application/vnd.github+json"
GITHUB_API_VERSION: str = "2022-11-28"
RELEASE_ASSET_SUFFIX: str = ".zip"
RELEASE_PUBLISHED_ACTION: str = "published"

# ---------------------------------------------------------------------------
# Webhook signatures
# ---------------------------------------------------------------------------
SIGNATURE_HEADER: str = "X-Signature"
GITHUB_SIGNATURE_HEADER: str = "X-Hub-Signature-256"
SIGNATURE_PREFIX: str = "sha256="

# ---------------------------------------------------------------------------
# Invitation email
# ---------------------------------------------------------------------------
RESEND_API_URL: str = "https://api.resend.com/emails"
INVITE_EMAIL_SUBJECT: str = "Your Composio SDK Design Challenge"

# ---------------------------------------------------------------------------
# Response messages
# ---------------------------------------------------------------------------
INVALID_TOKEN_MESSAGE: str = "Invalid token"
NO_RELEASE_MESSAGE: str = "no release available"
