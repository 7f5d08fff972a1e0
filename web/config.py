"""
Web server configuration.
"""
from core.config import config, VERSION

WEB_HOST = config.web.host
WEB_PORT = config.web.port
CORS_ORIGINS = config.web.cors_origins

__all__ = ["WEB_HOST", "WEB_PORT", "CORS_ORIGINS", "VERSION"]
