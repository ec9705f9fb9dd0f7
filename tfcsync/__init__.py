"""Reconcile Terraform Cloud workspaces against a declared specification, with an in-memory client."""

__version__ = "0.1.0"