"""Capability definitions, registry, dispatch and responses"""
