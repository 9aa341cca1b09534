"""
groomingslots - scheduling engine for a pet-grooming shop's booking backend.
"""

__version__ = "0.1.0"
