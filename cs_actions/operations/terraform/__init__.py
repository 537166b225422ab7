"""Terraform Cloud actions."""
