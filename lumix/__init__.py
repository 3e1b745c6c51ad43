"""Lumix back-office core: invoicing, payroll runs and document dispatch."""

__version__ = "1.0.0"
