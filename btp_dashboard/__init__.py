"""Factures BTP dashboard service."""
