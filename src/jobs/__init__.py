"""Batch jobs for the EMI sweeps."""
