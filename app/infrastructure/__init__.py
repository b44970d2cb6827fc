"""Infrastructure modules for the document notifier.

Centralized infrastructure components:
- configuration: Settings management (Settings and its settings groups)
- logging: Structured logging setup and context binding
- operations: Operation results and provider error classification
- services: Dependency injection services (SettingsDep, get_settings)
"""
