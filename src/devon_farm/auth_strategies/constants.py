# auth_strategies/constants.py

STYTCH = "stytch"

# Stytch consumer API paths
STYTCH_LOGIN_OR_CREATE_PATH = "/v1/magic_links/email/login_or_create"
STYTCH_MAGIC_LINK_AUTHENTICATE_PATH = "/v1/magic_links/authenticate"
STYTCH_SESSIONS_AUTHENTICATE_PATH = "/v1/sessions/authenticate"
STYTCH_SESSIONS_REVOKE_PATH = "/v1/sessions/revoke"
STYTCH_JWKS_PATH = "/v1/sessions/jwks/{project_id}"

# Session JWT claims
CLAIM_SUB = "sub"
CLAIM_IAT = "iat"
STYTCH_SESSION_CLAIM = "https://stytch.com/session"

# Signing algorithm used by Stytch session JWTs
STYTCH_JWT_ALGORITHM = "RS256"

# How long a fetched JWKS document is reused before refetching
JWKS_CACHE_TTL_SECONDS = 3600

# Minimum gap between refetches triggered by an unrecognised kid
JWKS_FORCED_REFRESH_COOLDOWN_SECONDS = 60
