"""Grading of player decisions against basic strategy."""

from dataclasses import dataclass

from cardplay.strategy.basic import Action, is_optimal_decision


@dataclass
class DecisionTracker:
    """Running tally of how often the player matched the advised action."""

    total_decisions: int = 0
    correct_decisions: int = 0
    current_streak: int = 0
    best_streak: int = 0

    def record_decision(self, player_action: Action, optimal_action: Action) -> bool:
        """
        Record one decision.

        Returns:
            True if the player's action was the optimal one
        """
        correct = is_optimal_decision(player_action, optimal_action)
        self.total_decisions += 1
        if correct:
            self.correct_decisions += 1
            self.current_streak += 1
            self.best_streak = max(self.best_streak, self.current_streak)
        else:
            self.current_streak = 0
        return correct

    @property
    def accuracy(self) -> float:
        """Percentage of correct decisions (100 before any decision)."""
        if self.total_decisions == 0:
            return 100.0
        return self.correct_decisions / self.total_decisions * 100

    def reset(self) -> None:
        self.total_decisions = 0
        self.correct_decisions = 0
        self.current_streak = 0
        self.best_streak = 0
