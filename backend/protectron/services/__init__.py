"""Protectron - Services"""
