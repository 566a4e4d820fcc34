"""
Budgetly - personal finance backend.

Users, their bills and goal-based savings plannings, with authentication,
password recovery and AI-assisted plan generation.
"""

__version__ = "0.1.0"
