"""gotestsynth - synthesize Go unit test inputs and assertions."""

__version__ = "0.1.0"
