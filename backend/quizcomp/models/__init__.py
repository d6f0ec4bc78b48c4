from quizcomp.models.user import User
from quizcomp.models.question import Question
from quizcomp.models.attempt import Attempt

__all__ = [
    "User",
    "Question",
    "Attempt",
]
