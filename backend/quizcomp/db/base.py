from quizcomp.db.base_class import Base

# Import every model so Base.metadata knows all tables
from quizcomp.models.user import User
from quizcomp.models.question import Question
from quizcomp.models.attempt import Attempt

__all__ = ["Base", "User", "Question", "Attempt"]
