"""Policy documents: models, schema and loading."""
