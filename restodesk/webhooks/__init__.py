"""Inbound webhook routers"""
