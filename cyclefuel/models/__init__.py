"""
Domain models for cycle tracking, nutrition and personalization.
"""
