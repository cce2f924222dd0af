"""Chat orchestration: command routing, prompts, history and generation sessions."""
