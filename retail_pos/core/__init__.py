"""Core building blocks shared by the sales bounded context."""
