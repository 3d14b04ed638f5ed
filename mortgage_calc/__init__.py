"""Mortgage repayment calculator: engine, wizard state and CLI."""
