"""Databricks (Unity Catalog) connectivity."""
