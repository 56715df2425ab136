"""
Automatic moderation for Modguard.

- **capability.py**: the ``ChatPlatform`` action surface and ``ActionResult``.
- **enforcement_datatypes.py**: actions, states, outcomes and reports.
- **messages.py**: English and Portuguese user-facing texts.
- **embeds.py**: audit and DM embed payloads.
- **enforcement_pipeline.py**: ordered, fault tolerant enforcement.
- **moderation_engine.py**: config gate, classification and enforcement.
"""
