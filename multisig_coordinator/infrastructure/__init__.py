"""Infrastructure: adapters, stubs and observability."""
