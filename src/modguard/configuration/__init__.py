"""
Configuration for Modguard.

- **app_configuration.py**: YAML application config (``app_config``).
- **moderation_settings.py**: typed view of the ``moderation`` section.
- **moderation_config.py**: per-guild ``TenantModerationConfig`` and ``Language``.
- **tenant_config_store.py**: SQLite and in-memory tenant config stores.
"""
