"""parrot: a chat bot that repeats what it is told, with printf-style formatting."""
