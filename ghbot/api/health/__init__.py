"""Liveness and readiness probes.

Usage
-----
Import the probe resources for route registration::

    from ghbot.api.health.resources import HealthResource, ReadyResource
"""
