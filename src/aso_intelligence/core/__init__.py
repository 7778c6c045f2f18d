"""Keyword scoring engine.

``session`` binds one marketplace to a paced, retried ``executor``;
``analyzer`` turns the listings it fetches into 1-10 difficulty, traffic and
opportunity scores using the ``normalizer`` primitives. Marketplace clients
live in ``clients``.
"""
