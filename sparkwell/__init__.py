"""
Sparkwell: quest recommendation, reflection scoring and a spark-point
reward economy for a personal-growth application.
"""

__version__ = "1.0.0"
