"""
TIAC service configuration
Address, port, default security level and log level, all overridable from the environment.
"""

import os

# Defaults
DEFAULT_HOST = os.getenv('TIAC_HOST', 'localhost')
DEFAULT_PORT = int(os.getenv('TIAC_PORT', 5010))

# Setup parameters
DEFAULT_SECURITY_LEVEL = int(os.getenv('TIAC_SECURITY_LEVEL', 256))

DEFAULT_LOG_LEVEL = os.getenv('TIAC_LOG_LEVEL', 'INFO').upper()


class Config:
    """Service settings"""

    def __init__(self):
        self.host = DEFAULT_HOST
        self.port = DEFAULT_PORT
        self.security_level = DEFAULT_SECURITY_LEVEL
        self.log_level = DEFAULT_LOG_LEVEL

    @property
    def url(self):
        return f"http://{self.host}:{self.port}"


# Global instance
config = Config()
