"""
Fitness Wizard

Turns a fitness profile into an AI-generated 4-week training and nutrition
plan, rendered to PDF and optionally delivered by email.
"""

__version__ = '2.0.0'
