from enum import Enum


class ActivityType(str, Enum):
    ANIMAL_ADDED = "animal_added"
    ANIMAL_UPDATED = "animal_updated"
    TASK_COMPLETED = "task_completed"
    HEALTH_CHECK = "health_check"
    WEIGHT_RECORDED = "weight_recorded"
    FARM_CREATED = "farm_created"
    USER_JOINED = "user_joined"


class ActivityEntityType(str, Enum):
    ANIMAL = "animal"
    TASK = "task"
    FARM = "farm"
    USER = "user"
    HEALTH = "health"
    WEIGHT = "weight"
