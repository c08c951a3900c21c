"""
User and role models.
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, Integer
from expense_app.db.base import Base, BaseModel


class Role(Base):
    """Role a user holds (e.g. Employee, Manager)."""
    __tablename__ = "Roles"

    role_id = Column("RoleId", Integer, primary_key=True, autoincrement=True)
    role_name = Column("RoleName", String(50), unique=True, nullable=False)


class User(BaseModel):
    """User model. Managers are users referenced by ManagerId; no cycle check is made."""
    __tablename__ = "Users"

    user_id = Column("UserId", Integer, primary_key=True, autoincrement=True)
    user_name = Column("UserName", String(100), nullable=False)
    email = Column("Email", String(255), unique=True, nullable=False, index=True)
    role_id = Column("RoleId", Integer, ForeignKey("Roles.RoleId"), nullable=False)
    manager_id = Column("ManagerId", Integer, ForeignKey("Users.UserId"), nullable=True)
    is_active = Column("IsActive", Boolean, default=True, nullable=False)
