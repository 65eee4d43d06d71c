# Importing this package registers every table on Base.metadata
from ideaflow.models.user import User
from ideaflow.models.case import Case, ProcessedCase, Project
from ideaflow.models.review import Review

__all__ = ["User", "Case", "ProcessedCase", "Project", "Review"]
