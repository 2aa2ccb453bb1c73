"""Business logic and data access. Every function takes the request's AsyncSession."""
