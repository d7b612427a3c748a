"""
SQLAlchemy models for the correction service.
"""
from proofline.models.ignore_rule import IgnoreRule

__all__ = [
    "IgnoreRule",
]
