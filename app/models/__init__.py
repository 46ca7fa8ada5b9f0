"""SQLAlchemy models"""
from app.models.user import User
from app.models.group import Group, GroupActivity, GroupMember
from app.models.expense import Expense
from app.models.expense_participant import ExpenseParticipant

__all__ = ["User", "Group", "GroupMember", "GroupActivity", "Expense", "ExpenseParticipant"]
