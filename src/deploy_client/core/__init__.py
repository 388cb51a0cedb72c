"""Core types shared by the transport, resilience and deploy layers."""
