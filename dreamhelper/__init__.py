"""
Dream Helper - Lotus recommendations for bubble visions.

Simulates lotus effects on a bubble vision, scores the outcomes against
user weights and ranks the choices on offer.
"""

__version__ = "0.1.0"
