"""
LivingWord AI orchestration service.

Routes scripture retrieval, key-takeaway generation, application scoring,
takeaway validation and verse search across interchangeable AI backends.
"""

__version__ = "1.0.0"
