"""
Modguard - rule-based automatic moderation for Discord

Modguard scores every guild message with a fixed set of weighted detectors
(fake Nitro offers, phishing links, mass mentions, shouting, repetition,
keyboard mashing, profanity in English and Portuguese, spam phrases) and runs
a best-effort enforcement pipeline on flagged messages.

Core Components:

- **Detection**: pure, deterministic classifier shared by the live engine and
  the ``/automod test`` dry run
- **Moderation**: config gate and ordered enforcement (delete, warn, timeout,
  audit log, DM) over an abstract chat platform
- **Configuration**: YAML app settings and per-guild automod settings in SQLite
- **Bot**: py-cord adapter, listener and admin slash commands

Usage:
    from modguard.main import main
    main()
"""
