"""
Frame Pricing Package

Order pricing engine for a custom picture-framing point of sale.
Turns artwork dimensions, layered frame/mat/glass selections and special
services into priced orders, then aggregates orders into priced order groups.
"""

__version__ = "1.0.0"
