from app.db.models.role import Role
from app.db.models.user import User
from app.db.models.farm import Farm
from app.db.models.animal import Animal, HealthRecord
from app.db.models.task import Task
from app.db.models.activity import Activity

__all__ = ["Role", "User", "Farm", "Animal", "HealthRecord", "Task", "Activity"]
