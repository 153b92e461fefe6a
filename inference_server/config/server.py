"""HTTP bind address and startup behavior."""

import os

from ..utils.env import env_flag


HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# Load models and the index during startup instead of on the first request
PRELOAD_CONTEXT = env_flag("PRELOAD_CONTEXT", True)


__all__ = ["HOST", "PORT", "PRELOAD_CONTEXT"]
