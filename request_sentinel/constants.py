"""Shared constants for Request Sentinel."""

SERVER_NAME = "Request Sentinel"
SERVER_VERSION = "0.1.0"

# Request parameter that forces one client out of the resolved list
DEFAULT_CLIENT_NAME_PARAMETER = "force_client"

# Request parameter / header flagging an AJAX request
AJAX_PARAMETER = "is_ajax_request"
AJAX_HEADER = "X-Requested-With"
AJAX_HEADER_VALUE = "XMLHttpRequest"

# Keys used in request attributes and the session store
USER_PROFILES = "sentinel_user_profiles"
LOAD_PROFILES_FROM_SESSION = "sentinel_load_profiles_from_session"
REQUESTED_URL = "sentinel_requested_url"

# Separator for client / authorizer / matcher name lists
ELEMENT_SEPARATOR = ","

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"

# Tracing
TRACER_NAME = "request_sentinel"
SECURITY_SPAN_NAME = "request_sentinel.security"
