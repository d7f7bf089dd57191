"""
Submission package: category configuration, entry-form models, validation and
the upload/record service.
"""

from submission.categories import Category, get_category_config

__all__ = ["Category", "get_category_config"]
