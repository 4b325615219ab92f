"""HTTP request handlers that can be wrapped by a rate guard."""

from rateguard.adapters.http.httpx_handler import HttpxRequestHandler

__all__ = ["HttpxRequestHandler"]
