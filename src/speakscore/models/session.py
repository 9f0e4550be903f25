"""Client-side test-taking state."""

from pydantic import BaseModel, Field

from speakscore.models.assessment import Evaluation


class TestSession(BaseModel):
    """Progress through one sitting of a test.

    Tracks the current question, the evaluations collected so far and
    whether the sitting is complete.
    """

    __test__ = False

    current_question: int = 0
    evaluations: list[Evaluation] = Field(default_factory=list)
    completed: bool = False

    def add_result(self, evaluation: Evaluation) -> None:
        self.evaluations.append(evaluation)

    def advance(self, total_questions: int) -> bool:
        """Move to the next question.

        Returns:
            True if another question remains, False once the test is complete.
        """
        if self.current_question < total_questions - 1:
            self.current_question += 1
            return True
        self.complete()
        return False

    def complete(self) -> None:
        self.completed = True

    def reset(self) -> None:
        self.current_question = 0
        self.evaluations = []
        self.completed = False
