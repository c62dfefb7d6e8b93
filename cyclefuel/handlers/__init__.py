"""
Lambda handlers package for AWS Lambda functions.
"""
from .cycle import handler as cycle_handler
from .feedback import handler as feedback_handler
from .food_log import handler as food_log_handler
from .recommendations import handler as recommendations_handler

__all__ = [
    "cycle_handler",
    "feedback_handler",
    "food_log_handler",
    "recommendations_handler",
]
