"""Cobot integration: API client, response normalization, aggregation and write-back."""

from cobot_dashboard.cobot.client import CobotClient

__all__ = ["CobotClient"]
