# Marks `livetimers.deps` as a package so imports like
# `from livetimers.deps.auth import require_user` resolve reliably.
