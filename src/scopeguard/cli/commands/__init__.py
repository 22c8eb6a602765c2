"""CLI command implementations for ScopeGuard.

- start: Run an adaptive questionnaire
- sessions / summary: Browse saved sessions
- usage: Today's project allowance
- config: Manage configuration
"""
