"""
API blueprints for Crownboard.
"""
