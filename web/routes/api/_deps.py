"""Shared dependencies for API route modules."""
import logging
import time

from fastapi import Request

from core.cache import ResponseCache
from core.orders import OrderService


# Shared logger factory
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_order_service(request: Request) -> OrderService:
    """Order pipeline attached to the app at startup (see web.main)."""
    return request.app.state.order_service


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


# Track startup time for uptime calculation
START_TIME = time.time()
