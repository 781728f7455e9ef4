# Resolution package for the markovr engine
"""
Context resolution modules.

Turns (possibly partial) query windows into the Outcome Distribution
that answers them: an exact match, a marginal over wildcard slots,
or an explicit "no data".
"""
