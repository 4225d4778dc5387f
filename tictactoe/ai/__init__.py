"""AI components: exhaustive minimax bot."""

from .minimax import MinimaxBot, BotConfig
