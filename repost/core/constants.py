"""
FILE: repost/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - HTTP_METHODS: Methods accepted by 'create request --method'
  - COMMON_HEADERS: Header names offered by completion
  - NAME_PREFIXES: Verb prefixes used to suggest request names
  - PLAYGROUND: Name of the in-memory workspace
  - EXTRACTION_SOURCES: Where 'extract' can read a value from
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
  - Single source of truth for method names and header names
"""

# HTTP methods
HTTP_METHODS = (
    "GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE", "CONNECT",
)
DEFAULT_METHOD = "GET"

# Request name prefix -> inferred method (checked in order)
METHOD_PREFIXES = (
    (("create", "post"), "POST"),
    (("delete",), "DELETE"),
    (("replace", "put"), "PUT"),
    (("update", "patch"), "PATCH"),
    (("head",), "HEAD"),
)

# Suggested request name prefixes
NAME_PREFIXES = ("create", "update", "get", "delete")

# Header names offered when completing -H/--header
COMMON_HEADERS = (
    "A-IM", "Accept", "Accept-Charset", "Accept-Datetime", "Accept-Encoding",
    "Accept-Language", "Access-Control-Request-Method", "Access-Control-Request-Headers",
    "Authorization", "Cache-Control", "Connection", "Content-Encoding",
    "Content-Length", "Content-MD5", "Content-Type", "Cookie", "Date", "Expect",
    "Forwarded", "From", "Host", "HTTP2-Settings", "If-Match", "If-Modified-Since",
    "If-None-Match", "If-Range", "If-Unmodified-Since", "Max-Forwards", "Origin",
    "Pragma", "Prefer", "Proxy-Authorization", "Range", "Referer", "TE", "Trailer",
    "Transfer-Encoding", "User-Agent", "Upgrade", "Via", "Warning",
)

# Workspaces
PLAYGROUND = "playground"
DB_SUFFIX = ".db"
HISTORY_FILE = "repost_history"

# Extraction sources
SOURCE_HEADER = "header"
SOURCE_BODY = "body"
EXTRACTION_SOURCES = (SOURCE_HEADER, SOURCE_BODY)

# Variable sources
SOURCE_USER = "user"
