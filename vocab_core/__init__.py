"""
Vocabulary trainer core: SM-2 review scheduling, word catalogue and
review analytics.
"""
