"""Console, prompt and .env helpers."""
