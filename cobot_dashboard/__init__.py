"""Cobot member data proxy for the Chatwoot dashboard widget."""
