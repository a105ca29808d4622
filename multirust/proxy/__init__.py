"""Forwarding tool invocations to installed toolchains."""

from .dispatcher import SENTINEL, ProxyDispatcher, has_sentinel

__all__ = ["SENTINEL", "ProxyDispatcher", "has_sentinel"]
