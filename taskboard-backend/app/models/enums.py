# File: app/models/enums.py

"""
Closed value sets shared by the models, schemas and the access policy.

Values are the strings the dashboard sends and displays.
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "Admin"
    TEAM_LEAD = "Team Lead"
    TEAM_MEMBER = "Team Member"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    COMPLETED = "Completed"
