"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Persisted keys (the entire durable state surface)
# ------------------------------------------------------------------

INSTALLATION_ID_KEY = "com.primlo.hotaru.installationId"
SESSION_ID_KEY = "com.primlo.hotaru.sessionId"
USER_DATA_KEY = "com.primlo.hotaru.userData"
USER_CHANGELOG_KEY = "com.primlo.hotaru.userChangelog"

# ------------------------------------------------------------------
# Server endpoints (appended to the configured server URL)
# ------------------------------------------------------------------

ENDPOINT_LOG_IN_AS_GUEST = "_logInAsGuest"
ENDPOINT_SIGN_UP = "_signUp"
ENDPOINT_LOG_IN = "_logIn"
ENDPOINT_CONVERT_GUEST_USER = "_convertGuestUser"
ENDPOINT_LOG_OUT = "_logOut"
ENDPOINT_SYNCHRONIZE_USER = "_synchronizeUser"
ENDPOINT_RUN_QUERY = "_runQuery"

SECURE_SCHEME = "https://"
DEFAULT_REQUEST_TIMEOUT: float = 30.0

#: Responses with a numeric code at or above this are server-class errors.
SERVER_ERROR_MIN_CODE = 500
