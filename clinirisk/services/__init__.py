"""Clinical risk services.

- risk_engine: deterministic multi-domain risk assessment
- notification_service: immediate action events for emergencies

User identifiers are always passed through hash_pii() before logging.
"""
