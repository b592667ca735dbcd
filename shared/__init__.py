"""
Shared Kernel

This module contains value objects and helpers shared by the booking apps.
"""
