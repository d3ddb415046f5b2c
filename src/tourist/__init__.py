"""Tourist app backend: leaderboard ranking and location badge progress."""
