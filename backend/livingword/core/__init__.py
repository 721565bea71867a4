"""
Core application modules.
Logging, metrics, configuration and resilience helpers shared by the services.
"""
