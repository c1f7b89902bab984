"""Token estimation for user input."""

import tiktoken

from contactcmd_ai.errors import MessageTooLongError
from contactcmd_ai.utils.logging import get_logger

logger = get_logger(__name__)


class TokenCounter:
    """Estimates token counts and enforces a per-message budget."""

    tokenizer: tiktoken.Encoding | None = None

    def __init__(self, max_tokens: int = 2000, encoding_model: str = "gpt-4"):
        """Initialize token counter.

        Args:
            max_tokens: Maximum tokens allowed in a single user message
            encoding_model: Model name whose tiktoken encoding is used
        """
        self.max_tokens = max_tokens

        try:
            self.tokenizer = tiktoken.encoding_for_model(encoding_model)
        except Exception as e:
            # Encoding files are fetched on first use; offline we estimate instead
            logger.warning(f"Tokenizer unavailable, falling back to character estimate: {e}")
            self.tokenizer = None

    def count(self, text: str) -> int:
        """Estimate token count for a piece of text."""
        try:
            return len(self.tokenizer.encode(text)) if self.tokenizer else len(text) // 4
        except Exception:
            # Fallback: roughly 4 characters per token
            return len(text) // 4

    def validate(self, text: str) -> int:
        """Check a message against the budget.

        Returns:
            The estimated token count

        Raises:
            MessageTooLongError: If the message exceeds the budget
        """
        token_count = self.count(text)
        if token_count > self.max_tokens:
            raise MessageTooLongError(token_count, self.max_tokens)
        return token_count
