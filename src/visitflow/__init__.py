"""
visitflow: hospital visit coordination service

Drives a patient's visit from check-in through vitals, doctor assignment,
consultation and pharmacy/referral hand-off, orders the waiting queue by
priority and arrival, and merges voice-extracted intake data into forms.
"""

__version__ = "0.1.0"
__author__ = "visitflow Team"
__description__ = "Hospital visit lifecycle and queue coordination"
