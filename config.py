# Global knobs (registry policies + logging)

# Duplicate-key policy for subscribe():
#   "ACCUMULATE" -> multimap, every subscribe adds a handler
#   "REPLACE"    -> map, a new subscribe overwrites the key's handlers
DUPLICATE_POLICY = "ACCUMULATE"

# What publish() does when a handler raises:
#   "ISOLATE"   -> log it, keep dispatching, report failures in the return value
#   "COLLECT"   -> keep dispatching, then raise PublishError with every failure
#   "PROPAGATE" -> let the first exception out, skip remaining handlers
ERROR_POLICY = "ISOLATE"

# Deep-copy arguments per handler instead of sharing the same objects
COPY_ARGS = False

# CSV dispatch trace (one row per handler call); None disables it
DISPATCH_LOG_PATH = None

# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_registry_defaults():
    return {
        "duplicate_policy": DUPLICATE_POLICY,
        "error_policy": ERROR_POLICY,
        "copy_args": COPY_ARGS,
        "log_path": DISPATCH_LOG_PATH,
    }
