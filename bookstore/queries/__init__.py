"""Query execution package."""

from bookstore.queries.executor import BookFilter, BookQuery, QueryExecutor, QueryResult

__all__ = ["BookFilter", "BookQuery", "QueryExecutor", "QueryResult"]
