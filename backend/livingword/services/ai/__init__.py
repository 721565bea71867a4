"""
Multi-provider AI orchestration.

Providers register with a `ProviderRegistry`; `AIService` routes each
operation across the available providers in priority order and returns an
`OperationResult`.
"""
