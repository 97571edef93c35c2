"""
EMI Billing Service - Installment Billing & Course Access Control

A FastAPI-based microservice that tracks per-course installment (EMI)
schedules, allocates payments across unpaid installments, and locks or
unlocks course access as payers fall behind or catch up.
"""

__version__ = "0.1.0"
