"""Utility helpers for the log relay backend."""

from .network import DEFAULT_CLIENT_IP, get_client_ip, is_private_ip

__all__ = [
    "DEFAULT_CLIENT_IP",
    "get_client_ip",
    "is_private_ip",
]
