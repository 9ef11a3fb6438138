"""Taskboard: task lifecycle and dashboard REST backend."""
