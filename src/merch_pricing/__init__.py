"""
Merch Pricing Package

Pricing-and-bundling engine for the merchandising back office.
Derives consumer prices, per-channel guardrails, autotune advice,
multi-unit bundle proposals and partner quotes from product cost inputs.
"""

__version__ = "2.2.0"
