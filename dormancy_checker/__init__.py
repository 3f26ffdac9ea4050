"""
Dormant Account Checker for Unit banking accounts.

A scheduled pipeline that:
- Fetches every account from the Unit ledger
- Resolves the most recent transaction per account
- Enriches accounts with customer and employer details (best-effort)
- Classifies dormant accounts into communication and closure tiers
- Posts alerts to Slack
"""
