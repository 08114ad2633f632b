"""Shared configuration."""
