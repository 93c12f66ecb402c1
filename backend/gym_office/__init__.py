"""Gym office back office: rental requests, plan quotas and billing invoices."""
