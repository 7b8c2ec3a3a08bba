"""Loan approval workflow service for a microfinance back office."""
