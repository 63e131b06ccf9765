"""Closed enumerations shared by the API schemas, ORM and timeline engine."""

from enum import Enum


class PhaseStatus(str, Enum):
    """Lifecycle status of a phase"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"


class Granularity(str, Enum):
    """Timeline axis unit used for padding and tick marks"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class RecentActivityOrder(str, Enum):
    """How the dashboard picks its recent activity entries"""
    COLLECTION = "collection"
    UPDATED_AT = "updated_at"


PHASE_STATUSES = tuple(status.value for status in PhaseStatus)
