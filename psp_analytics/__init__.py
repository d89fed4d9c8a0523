"""
psp-analytics: payment service provider performance analysis.

Reconstructs per-order transaction journeys from raw attempt rows and
derives de-duplicated approval statistics per PSP, country and period.
"""

__version__ = "0.1.0"
