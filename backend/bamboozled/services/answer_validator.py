"""Local answer checking"""

import re


class AnswerValidator:
    """Compares guesses with puzzle answers after normalization"""

    @staticmethod
    def normalize(text: str) -> str:
        """
        Normalize text for comparison.

        Lowercases, drops punctuation, treats hyphens as spaces and
        collapses whitespace.
        """
        normalized = text.lower().strip()
        normalized = re.sub(r'[^\w\s-]', '', normalized)
        normalized = normalized.replace('-', ' ')
        return ' '.join(normalized.split())

    def is_correct(self, guess: str, answer: str) -> bool:
        normalized_guess = self.normalize(guess)
        normalized_answer = self.normalize(answer)

        if not normalized_guess:
            return False
        if normalized_guess == normalized_answer:
            return True

        # "sunflower" matches "sun flower"
        return normalized_guess.replace(' ', '') == normalized_answer.replace(' ', '')
