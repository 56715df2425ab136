"""
Message classification for Modguard.

- **patterns.py**: immutable pattern tables and profanity word lists.
- **message_facts.py**: facts derived once per message.
- **profanity.py**: whole-word profanity lookup with a leetspeak pass.
- **heuristics.py**: randomness and nonsense letter heuristics.
- **detectors.py**: the ordered, weighted detector set.
- **classifier.py**: score aggregation and the ``classify`` entry point.
"""
