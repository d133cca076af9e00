"""Consent-compliance auditing for website tracking pixels."""
