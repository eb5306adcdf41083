"""Protectron - EU AI Act Compliance Engine"""
